"""
Refresh Orchestrator.

Keeps each content kind's held record set current: fetch the kind's sheet
tab, parse it, and swap the held set on a non-empty result. Any failure is
logged and the previous set (fallback or last good) is retained; the next
interval is the retry.

Kinds refresh independently. Refreshes of the same kind are single-flight:
a request made while one is running awaits that run instead of fetching
again.
"""

import asyncio
import logging
from collections import Counter, deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

from cityguide.configs.config import Config, load_yaml_config
from cityguide.configs.settings import Settings
from cityguide.ingestion.adapters import BaseSourceAdapter, SheetAdapter, SheetSourceConfig
from cityguide.ingestion.errors import (
    ContentLoadError,
    EmptyResult,
    FailureReason,
    ParseFailure,
    SourceUnavailable,
)
from cityguide.ingestion.normalization.kind_schema import KindSchema, get_kind_schema
from cityguide.ingestion.normalization.parser import parse
from cityguide.ingestion.store import ContentStore
from cityguide.monitoring.logging import with_context
from cityguide.schemas.content import ContentKind, ContentRecord

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[SheetSourceConfig], BaseSourceAdapter]

DEFAULT_HISTORY_LIMIT = 500


class RefreshStatus(str, Enum):
    """Outcome of one refresh."""

    UPDATED = "updated"
    RETAINED = "retained"
    SKIPPED = "skipped"


@dataclass
class RefreshResult:
    """Result of one refresh of one content kind."""

    kind: ContentKind
    status: RefreshStatus
    record_count: int = 0
    reason: Optional[FailureReason] = None
    detail: str = ""
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if self.started_at and self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return 0.0

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "status": self.status.value,
            "recordCount": self.record_count,
            "reason": self.reason.value if self.reason else None,
            "detail": self.detail,
            "durationSeconds": round(self.duration_seconds, 3),
        }


class RefreshOrchestrator:
    """
    Coordinates refreshes of every content kind.

    Responsibilities:
    - Build one adapter per configured kind
    - Refresh on demand, when stale, or on a fixed interval
    - Swap held sets on success, retain them on failure
    - Track refresh history
    """

    def __init__(
        self,
        store: ContentStore,
        sources: Dict[ContentKind, SheetSourceConfig],
        adapter_factory: Optional[AdapterFactory] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Held record sets to keep current
            sources: Sheet configuration per kind; missing kinds are never fetched
            adapter_factory: Builds an adapter from a source config
            history_limit: Most recent refresh results kept; older ones are dropped

        Raises:
            ValueError: If a source carries an unknown schema override
        """
        self.logger = logging.getLogger("orchestrator")
        self.store = store
        self.sources = {ContentKind(k): v for k, v in sources.items()}
        self.adapter_factory = adapter_factory or SheetAdapter
        self.adapters: Dict[ContentKind, BaseSourceAdapter] = {}
        self.schemas: Dict[ContentKind, KindSchema] = {
            kind: get_kind_schema(kind).with_overrides(source.schema_overrides)
            for kind, source in self.sources.items()
        }
        self.execution_history: Deque[RefreshResult] = deque(maxlen=history_limit)
        self._loops: Dict[ContentKind, asyncio.Task] = {}

        for kind, source in self.sources.items():
            self.store[kind].refresh_interval_seconds = source.refresh_interval_seconds

    # ========================================================================
    # SOURCES
    # ========================================================================

    def is_enabled(self, kind: ContentKind | str) -> bool:
        """Whether a kind is enabled and has a sheet to fetch."""
        source = self.sources.get(ContentKind(kind))
        return bool(source and source.enabled and source.is_configured)

    def get_adapter(self, kind: ContentKind) -> BaseSourceAdapter:
        """Get or create the adapter of a kind."""
        if kind not in self.adapters:
            self.adapters[kind] = self.adapter_factory(self.sources[kind])
        return self.adapters[kind]

    # ========================================================================
    # EXECUTION
    # ========================================================================

    async def refresh(self, kind: ContentKind | str) -> RefreshResult:
        """
        Refresh one kind.

        If a refresh of the same kind is already running, its result is
        awaited and returned instead of starting another fetch.

        Returns:
            RefreshResult
        """
        kind = ContentKind(kind)
        held = self.store[kind]

        if held.in_flight is not None and not held.in_flight.done():
            self.logger.debug(f"Joining in-flight refresh: {kind.value}")
            return await asyncio.shield(held.in_flight)

        task = asyncio.create_task(self._run_refresh(kind))
        held.in_flight = task
        task.add_done_callback(lambda t: _clear_in_flight(held, t))
        return await asyncio.shield(task)

    async def refresh_all(self) -> Dict[ContentKind, RefreshResult]:
        """
        Refresh every kind concurrently.

        Returns:
            Dictionary mapping kind -> RefreshResult
        """
        kinds = list(ContentKind)
        results = await asyncio.gather(*(self.refresh(kind) for kind in kinds))
        return dict(zip(kinds, results))

    async def refresh_if_stale(self, kind: ContentKind | str) -> Optional[RefreshResult]:
        """Refresh a kind only when its held set is past its interval."""
        kind = ContentKind(kind)
        if not self.is_enabled(kind) or not self.store[kind].is_stale():
            return None
        return await self.refresh(kind)

    async def _run_refresh(self, kind: ContentKind) -> RefreshResult:
        started = datetime.now(UTC)
        held = self.store[kind]
        log = with_context(self.logger, kind=kind.value, stage="refresh")

        if not self.is_enabled(kind):
            source = self.sources.get(kind)
            detail = "disabled" if source is None or not source.enabled else "no sheet configured"
            log.warning(f"Skipping refresh: {detail}")
            result = RefreshResult(kind, RefreshStatus.SKIPPED, len(held), detail=detail)

        else:
            try:
                records = await self._load(kind)
            except ContentLoadError as e:
                held.record_failure(ParseFailure.from_error(e))
                log.warning(f"Refresh failed, retaining {len(held)} {held.origin.value} record(s): {e}")
                result = RefreshResult(kind, RefreshStatus.RETAINED, len(held), reason=e.reason, detail=e.message)
            except Exception as e:
                failure = ParseFailure(FailureReason.SOURCE_UNAVAILABLE, str(e))
                held.record_failure(failure)
                log.error("Unexpected error during refresh", exc_info=True)
                result = RefreshResult(kind, RefreshStatus.RETAINED, len(held), reason=failure.reason, detail=str(e))
            else:
                held.replace(records)
                log.info(f"Refreshed: {len(records)} record(s)")
                result = RefreshResult(kind, RefreshStatus.UPDATED, len(records))

        result.started_at = started
        result.ended_at = datetime.now(UTC)
        self.execution_history.append(result)
        return result

    async def _load(self, kind: ContentKind) -> List[ContentRecord]:
        """
        Fetch and parse one kind.

        Raises:
            ContentLoadError: For every failure, including an empty result
        """
        fetched = await self.get_adapter(kind).fetch()
        if not fetched.success:
            raise SourceUnavailable("; ".join(fetched.errors) or "fetch failed", kind=kind.value)

        parsed = parse(kind, fetched.raw_text, schema=self.schemas[kind])
        if not parsed.ok:
            raise parsed.error.to_error(kind.value)
        if parsed.is_empty:
            raise EmptyResult("Parse yielded no records", kind=kind.value)
        return parsed.records

    # ========================================================================
    # SCHEDULING
    # ========================================================================

    def start(self, run_immediately: bool = True) -> None:
        """
        Start one background refresh loop per enabled kind.

        Must be called from a running event loop.
        """
        for kind, source in self.sources.items():
            if not self.is_enabled(kind):
                self.logger.info(f"Not scheduling {kind.value}: disabled or unconfigured")
                continue
            if kind in self._loops and not self._loops[kind].done():
                continue
            self._loops[kind] = asyncio.create_task(
                self._refresh_loop(kind, source.refresh_interval_seconds, run_immediately),
                name=f"refresh-{kind.value}",
            )
            self.logger.info(f"Scheduled {kind.value} every {source.refresh_interval_seconds:.0f}s")

    async def stop(self) -> None:
        """Cancel the refresh loops and close adapters."""
        loops = list(self._loops.values())
        for task in loops:
            task.cancel()
        await asyncio.gather(*loops, return_exceptions=True)
        self._loops.clear()

        for adapter in self.adapters.values():
            await adapter.close()
        self.adapters.clear()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._loops.values())

    async def _refresh_loop(self, kind: ContentKind, interval: float, run_immediately: bool) -> None:
        if not run_immediately:
            await asyncio.sleep(interval)
        while True:
            try:
                await self.refresh(kind)
            except asyncio.CancelledError:
                raise
            except Exception:
                self.logger.error(f"Refresh loop error for {kind.value}", exc_info=True)
            await asyncio.sleep(interval)

    # ========================================================================
    # HISTORY & STATS
    # ========================================================================

    def get_execution_history(self, kind: Optional[ContentKind | str] = None, limit: int = 10) -> List[RefreshResult]:
        """Get refresh history, optionally filtered by kind."""
        results = list(self.execution_history)
        if kind:
            results = [r for r in results if r.kind == ContentKind(kind)]
        return results[-limit:]

    def get_execution_stats(self, kind: Optional[ContentKind | str] = None) -> dict:
        """Get aggregate statistics about refreshes."""
        results = list(self.execution_history)
        if kind:
            results = [r for r in results if r.kind == ContentKind(kind)]

        if not results:
            return {"total_refreshes": 0}

        attempted = [r for r in results if r.status != RefreshStatus.SKIPPED]
        updated = sum(1 for r in attempted if r.status == RefreshStatus.UPDATED)
        reasons = Counter(r.reason.value for r in attempted if r.reason)

        return {
            "total_refreshes": len(results),
            "updated": updated,
            "retained": len(attempted) - updated,
            "skipped": len(results) - len(attempted),
            "success_rate": (updated / len(attempted) * 100) if attempted else 0,
            "failure_reasons": dict(reasons),
        }


def _clear_in_flight(held, task: asyncio.Task) -> None:
    # A newer refresh may already own the slot
    if held.in_flight is task:
        held.in_flight = None


# ============================================================================
# CONFIG LOADING
# ============================================================================


def build_sources(config: Dict[str, Any]) -> Dict[ContentKind, SheetSourceConfig]:
    """
    Build per-kind source configs from the content sources YAML.

    ``defaults`` are applied under every source; per-source keys win.
    """
    defaults = config.get("defaults") or {}
    sources: Dict[ContentKind, SheetSourceConfig] = {}

    for name, entry in (config.get("sources") or {}).items():
        merged = {**defaults, **(entry or {})}
        kind = ContentKind(name)
        sources[kind] = SheetSourceConfig(
            source_id=kind.value,
            sheet_id=str(merged.get("sheet_id") or "").strip(),
            sheet_name=merged.get("sheet_name", ""),
            enabled=bool(merged.get("enabled", True)),
            refresh_interval_seconds=float(merged.get("refresh_interval_minutes", 5)) * 60,
            base_url=merged.get("base_url") or "",
            request_timeout=float(merged.get("request_timeout") or 15.0),
            schema_overrides=merged.get("schema") or {},
        )
    return sources


def load_orchestrator_from_config(
    config_path: Optional[str | Path] = None,
    store: Optional[ContentStore] = None,
    adapter_factory: Optional[AdapterFactory] = None,
    settings: Optional[Settings] = None,
) -> RefreshOrchestrator:
    """
    Create an orchestrator from YAML config.

    Args:
        config_path: Path to content_sources.yaml; the configured default when omitted
        store: Store to keep current; a fallback-seeded one when omitted
        adapter_factory: Adapter builder passed to the orchestrator
        settings: Settings used for placeholder substitution and the history limit

    Returns:
        Configured RefreshOrchestrator
    """
    if config_path:
        config = load_yaml_config(Path(config_path), settings)
    else:
        config = Config.load_content_sources()
    sources = build_sources(config)

    for kind, source in sources.items():
        state = "enabled" if source.enabled else "disabled"
        logger.info(f"Source {kind.value}: sheet '{source.sheet_name}' ({state})")

    return RefreshOrchestrator(
        store or ContentStore.with_fallbacks(),
        sources,
        adapter_factory=adapter_factory,
        history_limit=settings.REFRESH_HISTORY_LIMIT if settings else DEFAULT_HISTORY_LIMIT,
    )
