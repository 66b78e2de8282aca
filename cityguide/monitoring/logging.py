"""Structured logging with context injection.

Features:
- console handler
- JSON logs optional (easy ingestion)
- context injection (kind/stage) without needing a big framework
"""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any

# Logger trees owned by the service
SERVICE_LOGGERS = ("cityguide", "orchestrator", "adapter")

# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in ("kind", "stage"):
            if hasattr(record, k):
                base[k] = getattr(record, k)

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        # allow structured payload
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            base["payload"] = payload

        return json.dumps(base, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Format log records as human-readable text."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [record.levelname, record.name]

        kind = getattr(record, "kind", None)
        stage = getattr(record, "stage", None)

        ctx = []
        if kind:
            ctx.append(f"kind={kind}")
        if stage:
            ctx.append(f"stage={stage}")

        if ctx:
            parts.append("[" + " ".join(ctx) + "]")

        parts.append(record.getMessage())
        s = " ".join(parts)

        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)

        return s


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Attach one console handler to each service logger tree."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    fmt = JsonFormatter() if json_logs else TextFormatter()

    for name in SERVICE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        logger.propagate = False

        # Clear old handlers if re-configuring
        for h in list(logger.handlers):
            logger.removeHandler(h)

        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(resolved)
        ch.setFormatter(fmt)
        logger.addHandler(ch)


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """Inject context fields into log records."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        merged = dict(self.extra)
        merged.update(extra)
        kwargs["extra"] = merged
        return msg, kwargs


def with_context(
    logger: logging.Logger,
    *,
    kind: str | None = None,
    stage: str | None = None,
) -> ContextAdapter:
    """Create a context adapter with kind and stage info."""
    extra: dict[str, Any] = {}
    if kind:
        extra["kind"] = kind
    if stage:
        extra["stage"] = stage
    return ContextAdapter(logger, extra)
