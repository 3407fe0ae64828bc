"""Reading the per-collection JSON fixtures under ``mock_data/``."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import BackendIOError

logger = logging.getLogger(__name__)


def fixture_path(fixtures_dir: Path, collection: str) -> Path:
    return Path(fixtures_dir) / f"{collection}.json"


def load_fixture(fixtures_dir: Path, collection: str) -> Optional[Any]:
    """Parsed fixture content, or None when the collection has no fixture file."""
    p = fixture_path(fixtures_dir, collection)
    if not p.exists():
        return None
    try:
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Failed to read fixture for %s from %s", collection, p)
        raise BackendIOError(collection, "load fixture", exc) from exc


def fixture_documents(raw: Any, collection: str) -> List[Dict[str, Any]]:
    """Flatten any accepted fixture shape into a list of documents."""
    if raw is None or raw == {}:
        return []
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict) and isinstance(raw.get(collection), list):
        return raw[collection]
    return [raw]


def available_fixtures(fixtures_dir: Path) -> List[str]:
    d = Path(fixtures_dir)
    if not d.is_dir():
        return []
    return sorted(p.stem for p in d.glob("*.json"))
