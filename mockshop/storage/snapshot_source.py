"""
Static snapshot backend: fixtures loaded once into memory, read-only.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import UnsupportedOperation
from .base import DataSource, collection_name
from .fixtures import fixture_documents, load_fixture
from .query import filter_documents, run_query

logger = logging.getLogger(__name__)


class StaticSnapshotDataSource(DataSource):
    writable = False

    def __init__(self, collection, fixtures_dir: Path):
        self.collection = collection_name(collection)
        self._fixtures_dir = Path(fixtures_dir)
        self._lock = threading.Lock()
        self._cache: Optional[List[Dict[str, Any]]] = None

    @property
    def loaded(self) -> bool:
        return self._cache is not None

    def _data(self) -> List[Dict[str, Any]]:
        with self._lock:
            if self._cache is None:
                raw = load_fixture(self._fixtures_dir, self.collection)
                if raw is None:
                    logger.warning("No fixture file for %s; serving an empty collection", self.collection)
                self._cache = fixture_documents(raw, self.collection)
            return self._cache

    def find_one(self, query) -> Optional[Dict[str, Any]]:
        found = run_query(self._data(), query, {"limit": 1})
        return found[0] if found else None

    def find(self, query=None, options=None) -> List[Dict[str, Any]]:
        return run_query(self._data(), query, options)

    def count(self, query=None) -> int:
        return len(filter_documents(self._data(), query))

    def create(self, doc):
        raise UnsupportedOperation(self.collection, "create")

    def update(self, query, update, options=None):
        raise UnsupportedOperation(self.collection, "update")

    def delete(self, query, options=None):
        raise UnsupportedOperation(self.collection, "delete")

    def reset(self) -> None:
        with self._lock:
            self._cache = None
