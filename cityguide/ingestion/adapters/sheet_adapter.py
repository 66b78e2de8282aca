"""
Sheet Source Adapter.

Fetches one spreadsheet tab through the visualization query endpoint:

    GET <base>/<sheet-id>/gviz/tq?tqx=out:json&sheet=<url-encoded name>

There is no retry loop; the next scheduled refresh is the retry.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from cityguide.schemas.content import ContentKind

from .base_adapter import AdapterConfig, BaseSourceAdapter, FetchResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://docs.google.com/spreadsheets/d"


@dataclass
class SheetSourceConfig(AdapterConfig):
    """
    Configuration for one content kind's sheet tab.

    ``source_id`` is the content kind name.
    """

    sheet_id: str = ""
    sheet_name: str = ""
    enabled: bool = True
    refresh_interval_seconds: float = 300.0
    base_url: str = DEFAULT_BASE_URL
    # Merged onto the built-in KindSchema for this kind
    schema_overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Normalize the kind name."""
        self.source_id = ContentKind(self.source_id).value

    @property
    def kind(self) -> ContentKind:
        return ContentKind(self.source_id)

    @property
    def url(self) -> str:
        """Query URL for this tab."""
        base = (self.base_url or DEFAULT_BASE_URL).rstrip("/")
        return f"{base}/{self.sheet_id}/gviz/tq?tqx=out:json&sheet={quote(self.sheet_name, safe='')}"

    @property
    def is_configured(self) -> bool:
        """Whether there is enough configuration to issue a fetch."""
        return bool(self.sheet_id and self.sheet_name)


class SheetAdapter(BaseSourceAdapter):
    """
    Adapter for a spreadsheet tab exposed as a visualization query.

    An ``httpx.AsyncClient`` can be supplied; otherwise one is created on
    first use and closed by ``close()``.
    """

    def __init__(self, config: SheetSourceConfig, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the sheet adapter.

        Args:
            config: SheetSourceConfig for the tab
            client: Shared HTTP client; the adapter does not close it
        """
        self._client = client
        self._owns_client = client is None
        super().__init__(config)

    @property
    def sheet_config(self) -> SheetSourceConfig:
        """Get typed config."""
        return self.config  # type: ignore[return-value]

    def _validate_config(self) -> None:
        """Validate sheet configuration."""
        if not self.sheet_config.sheet_name:
            raise ValueError(f"Sheet adapter for {self.source_id} requires sheet_name")

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            headers = {
                "Accept": "text/plain, application/json",
                **self.sheet_config.headers,
            }
            self._client = httpx.AsyncClient(headers=headers, follow_redirects=True)
        return self._client

    async def fetch(self, **kwargs) -> FetchResult:
        """
        Fetch the tab's raw response.

        Network and HTTP errors are captured in the result rather than
        raised.

        Returns:
            FetchResult with the verbatim body in ``raw_text``
        """
        fetch_started = datetime.now(UTC)
        url = self.sheet_config.url
        errors = []
        raw_text = ""
        status_code = None

        try:
            client = self._get_client()
            response = await client.get(url, timeout=self.sheet_config.request_timeout)
            status_code = response.status_code
            response.raise_for_status()
            raw_text = response.text

        except httpx.HTTPStatusError as e:
            self.logger.warning(f"Sheet fetch returned HTTP {e.response.status_code}")
            errors.append(f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            self.logger.warning(f"Sheet fetch failed: {e!r}")
            errors.append(str(e) or e.__class__.__name__)

        fetch_ended = datetime.now(UTC)
        self.logger.debug(
            f"GET {url} -> {status_code} in {(fetch_ended - fetch_started).total_seconds():.2f}s"
        )

        return FetchResult(
            success=not errors,
            raw_text=raw_text,
            status_code=status_code,
            errors=errors,
            metadata={"url": url, "bytes": len(raw_text)},
            fetch_started_at=fetch_started,
            fetch_ended_at=fetch_ended,
        )

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
