"""
Source Adapters for content ingestion.

Usage:
    from cityguide.ingestion.adapters import SheetAdapter, SheetSourceConfig

    config = SheetSourceConfig(source_id="events", sheet_id="...", sheet_name="Events")
    async with SheetAdapter(config) as adapter:
        result = await adapter.fetch()
"""

from .base_adapter import AdapterConfig, BaseSourceAdapter, FetchResult
from .sheet_adapter import DEFAULT_BASE_URL, SheetAdapter, SheetSourceConfig

__all__ = [
    "AdapterConfig",
    "BaseSourceAdapter",
    "FetchResult",
    "DEFAULT_BASE_URL",
    "SheetAdapter",
    "SheetSourceConfig",
]
