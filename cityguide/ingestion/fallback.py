"""
Static fallback record sets.

Events and articles ship with a bundled record set that is shown until a
refresh succeeds. Partners and neighborhoods have none; their held set
starts empty.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from cityguide.configs.config import Config
from cityguide.schemas.content import RECORD_MODELS, ContentKind, ContentRecord

logger = logging.getLogger(__name__)


def load_fallback_records(
    kind: ContentKind | str,
    path: Optional[Path] = None,
) -> List[ContentRecord]:
    """
    Load the bundled fallback records for a kind.

    Args:
        kind: Content kind
        path: Override for the asset location

    Returns:
        Typed records, or an empty list when the kind has no fallback set
    """
    kind = ContentKind(kind)
    if path is None:
        path = Config.get_fallback_paths().get(kind.value)
    if path is None:
        return []

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    model = RECORD_MODELS[kind]
    records = [model.model_validate(item) for item in raw]
    logger.debug(f"Loaded {len(records)} fallback {kind.value} from {Path(path).name}")
    return records


def load_all_fallbacks() -> Dict[ContentKind, List[ContentRecord]]:
    """Load the fallback set of every kind."""
    return {kind: load_fallback_records(kind) for kind in ContentKind}
