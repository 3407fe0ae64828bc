"""
Backend selection.

A ``DataContext`` carries the fixture directory, the document-store
directory and the backend switch. ``get_data_source`` reads the switch at
call time, so flipping it changes which backend the next call resolves to.
Adapters and their caches are created lazily and live as long as the
context.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict

from .base import DataSource, collection_name
from .document_source import DocumentStoreDataSource
from .json_store import JsonStore
from .snapshot_source import StaticSnapshotDataSource

logger = logging.getLogger(__name__)

DOCUMENT_STORE = "document_store"
SNAPSHOT = "snapshot"


class DataContext:
    def __init__(self, fixtures_dir: Path, db_dir: Path, use_document_store: bool = True):
        self.fixtures_dir = Path(fixtures_dir)
        self.store = JsonStore(Path(db_dir))
        self.use_document_store = bool(use_document_store)
        self._lock = threading.Lock()
        self._document_sources: Dict[str, DocumentStoreDataSource] = {}
        self._snapshot_sources: Dict[str, StaticSnapshotDataSource] = {}

    @property
    def db_dir(self) -> Path:
        return self.store.data_dir

    @property
    def is_writable(self) -> bool:
        return self.use_document_store

    @property
    def mode(self) -> str:
        return DOCUMENT_STORE if self.use_document_store else SNAPSHOT

    def set_mode(self, use_document_store: bool) -> bool:
        """Switch backends; returns the previous setting."""
        previous = self.use_document_store
        self.use_document_store = bool(use_document_store)
        if previous != self.use_document_store:
            logger.info("Data source switched to %s", self.mode)
        return previous

    def document_source(self, collection) -> DocumentStoreDataSource:
        name = collection_name(collection)
        with self._lock:
            source = self._document_sources.get(name)
            if source is None:
                source = DocumentStoreDataSource(name, self.store, self.fixtures_dir)
                self._document_sources[name] = source
            return source

    def snapshot_source(self, collection) -> StaticSnapshotDataSource:
        name = collection_name(collection)
        with self._lock:
            source = self._snapshot_sources.get(name)
            if source is None:
                source = StaticSnapshotDataSource(name, self.fixtures_dir)
                self._snapshot_sources[name] = source
            return source

    def data_source(self, collection) -> DataSource:
        if self.use_document_store:
            return self.document_source(collection)
        return self.snapshot_source(collection)

    def drop_document_store(self) -> int:
        """Delete every collection file; the next access reseeds from fixtures."""
        with self._lock:
            removed = self.store.drop_all()
            self._document_sources.clear()
        logger.info("Removed %d document store files from %s", removed, self.db_dir)
        return removed

    def reset_snapshots(self):
        with self._lock:
            sources = list(self._snapshot_sources.values())
        for source in sources:
            source.reset()


def get_data_source(collection, context: DataContext) -> DataSource:
    return context.data_source(collection)
