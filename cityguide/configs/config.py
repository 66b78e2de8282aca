"""Configuration loader for the city guide content service."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from cityguide.configs.settings import Settings, get_settings


def substitute_placeholders(content: str, settings: Settings) -> str:
    """
    Replace ``${KEY}`` placeholders with values from settings.

    Handles SecretStr values by unwrapping them; unknown placeholders are
    left untouched.
    """
    for key, value in settings.model_dump().items():
        placeholder = f"${{{key}}}"
        if placeholder in content:
            val_str = (
                value.get_secret_value()
                if hasattr(value, "get_secret_value")
                else ("" if value is None else str(value))
            )
            content = content.replace(placeholder, val_str)
    return content


def load_yaml_config(path: Path, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Read a YAML file after placeholder substitution."""
    settings = settings or get_settings()
    if not path.exists():
        raise FileNotFoundError(f"Missing config at {path}")

    with open(path, encoding="utf-8") as f:
        content = substitute_placeholders(f.read(), settings)

    return yaml.safe_load(content) or {}


class Config:
    """Configuration for the city guide content service."""

    CONFIG_DIR = Path(__file__).parent.resolve()

    @classmethod
    @lru_cache
    def load_content_sources(cls) -> dict:
        """Load the YAML configuration for content sources."""
        settings = get_settings()
        return load_yaml_config(settings.CONTENT_SOURCES_PATH, settings)

    @classmethod
    def get_fallback_paths(cls) -> Dict[str, Path]:
        """Return the fallback asset paths keyed by content kind."""
        settings = get_settings()
        return {
            "events": settings.FALLBACK_EVENTS_PATH,
            "articles": settings.FALLBACK_ARTICLES_PATH,
        }
