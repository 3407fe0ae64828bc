"""
Document store backend.

Each collection lives in a ``JsonCollection`` file. On first access the
collection gets its indexes and, when empty, is seeded from the matching
fixture. Records may be plain documents or legacy containers (one document
holding the whole collection in an array); every read and write path
handles both.
"""
from __future__ import annotations

import enum
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import DuplicateKeyError
from ..utils.generators import generate_id, iso_now
from .base import DataSource, collection_name
from .fixtures import fixture_documents, load_fixture
from .json_store import JsonCollection, JsonStore
from .modifiers import apply_update, sets_field, upsert_document
from .query import DeleteOptions, UpdateOptions, matches, run_query
from .records import Container, classify, is_container

logger = logging.getLogger(__name__)

COLLECTION_INDEXES = {
    "products": [("id", True), ("category", False)],
    "categories": [("id", True), ("slug", True), ("parent_id", False)],
    "customers": [("id", True), ("email", True)],
    "orders": [("id", True), ("customer_id", False)],
    "auth_tokens": [("token", True), ("customer_id", False)],
    "otp_sessions": [("id", True), ("phone", False)],
}
DEFAULT_INDEXES = [("id", True)]


class InitState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SEEDING = "seeding"
    READY = "ready"


class DocumentStoreDataSource(DataSource):
    writable = True

    def __init__(self, collection, store: JsonStore, fixtures_dir: Path):
        self.collection = collection_name(collection)
        self._store = store
        self._fixtures_dir = Path(fixtures_dir)
        self._init_lock = threading.Lock()
        self.state = InitState.UNINITIALIZED

    # --- lifecycle ----------------------------------------------------

    def _db(self) -> JsonCollection:
        db = self._store.collection(self.collection)
        if self.state is InitState.READY:
            return db
        with self._init_lock:
            if self.state is not InitState.READY:
                self._initialize(db)
        return db

    def _initialize(self, db: JsonCollection):
        self.state = InitState.SEEDING
        try:
            for field, unique in COLLECTION_INDEXES.get(self.collection, DEFAULT_INDEXES):
                db.ensure_index(field, unique=unique)
            if db.count() == 0:
                self._seed(db)
        except Exception:
            self.state = InitState.UNINITIALIZED
            raise
        self.state = InitState.READY

    def _seed(self, db: JsonCollection) -> int:
        raw = load_fixture(self._fixtures_dir, self.collection)
        if not fixture_documents(raw, self.collection):
            logger.warning("No fixture data found for %s", self.collection)
            return 0
        if isinstance(raw, list):
            db.insert(raw)
            seeded = len(raw)
        else:
            # legacy {"<collection>": [...]} fixtures are kept as one container record
            db.insert([raw])
            seeded = len(raw[self.collection]) if is_container(raw, self.collection) else 1
        logger.info("Seeded %s with %d records", self.collection, seeded)
        return seeded

    def open_collection(self) -> JsonCollection:
        """The initialized (indexed and seeded) backing collection."""
        return self._db()

    def reset(self) -> None:
        db = self._db()
        with self._init_lock:
            db.remove_all()
            self._seed(db)

    # --- helpers ------------------------------------------------------

    def _containers(self, db: JsonCollection) -> List[Container]:
        records = (classify(key, doc, self.collection) for key, doc in db.items())
        return [r for r in records if isinstance(r, Container)]

    def _plain_matches(self, db: JsonCollection, query) -> List[tuple]:
        return [(key, doc) for key, doc in db.find(query) if not is_container(doc, self.collection)]

    def _nested_matches(self, db: JsonCollection, query) -> List[Dict[str, Any]]:
        out = []
        for record in self._containers(db):
            out.extend(item for item in record.items if matches(item, query))
        return out

    def _check_unique(self, db: JsonCollection, doc: Dict[str, Any], containers: List[Container],
                      skip_key: Optional[str] = None, skip_item: Optional[tuple] = None):
        """Unique indexes only see plain records; container items are checked here."""
        for field, unique in COLLECTION_INDEXES.get(self.collection, DEFAULT_INDEXES):
            if not unique or field not in doc:
                continue
            same_value = {field: doc[field]}
            if any(key != skip_key for key, _ in self._plain_matches(db, same_value)):
                raise DuplicateKeyError(self.collection, field, doc[field])
            for record in containers:
                for i, item in enumerate(record.items):
                    if (record.key, i) != skip_item and matches(item, same_value):
                        raise DuplicateKeyError(self.collection, field, doc[field])

    def _modified(self, doc: Dict[str, Any], update: Dict[str, Any], now: str) -> Dict[str, Any]:
        new = apply_update(doc, update)
        if not sets_field(update, "updated_at"):
            new["updated_at"] = now
        return new

    # --- reads --------------------------------------------------------

    def find_one(self, query) -> Optional[Dict[str, Any]]:
        db = self._db()
        plain = self._plain_matches(db, query)
        if plain:
            return plain[0][1]
        nested = self._nested_matches(db, query)
        return nested[0] if nested else None

    def find(self, query=None, options=None) -> List[Dict[str, Any]]:
        db = self._db()
        docs = [doc for _, doc in self._plain_matches(db, query)]
        docs.extend(self._nested_matches(db, query))
        # ordering and paging run over the merged set so plain and
        # container storage produce the same page
        return run_query(docs, None, options)

    def count(self, query=None) -> int:
        db = self._db()
        return len(self._plain_matches(db, query)) + len(self._nested_matches(db, query))

    # --- writes -------------------------------------------------------

    def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(doc, dict):
            raise TypeError("document must be a dict")
        db = self._db()
        new = dict(doc)
        now = iso_now()
        new.setdefault("id", generate_id(self.collection))
        new.setdefault("created_at", now)
        new.setdefault("updated_at", new["created_at"])
        self._check_unique(db, new, self._containers(db))
        return db.insert([new])[0][1]

    def update(self, query, update: Dict[str, Any], options=None) -> int:
        opts = UpdateOptions.coerce(options)
        db = self._db()
        now = iso_now()
        matched = 0

        containers = self._containers(db)
        plain = self._plain_matches(db, query)
        if not opts.multi:
            plain = plain[:1]
        if plain:
            changes = {key: self._modified(doc, update, now) for key, doc in plain}
            for key, new in changes.items():
                self._check_unique(db, new, containers, skip_key=key)
            db.replace_many(changes)
            matched += len(plain)
            if not opts.multi:
                return matched

        for record in containers:
            changed = False
            items = record.items
            for i, item in enumerate(items):
                if matches(item, query):
                    new = self._modified(item, update, now)
                    self._check_unique(db, new, containers, skip_item=(record.key, i))
                    items[i] = new
                    matched += 1
                    changed = True
                    if not opts.multi:
                        break
            if changed:
                # the whole container is rewritten; concurrent writers to the
                # same container are last-writer-wins
                db.replace(record.key, record.doc)
                if not opts.multi:
                    break

        if matched == 0 and opts.upsert:
            self.create(upsert_document(query, update))
            return 1
        return matched

    def delete(self, query, options=None) -> int:
        opts = DeleteOptions.coerce(options)
        db = self._db()

        keys = [key for key, _ in self._plain_matches(db, query)]
        if not opts.multi:
            keys = keys[:1]
        removed = db.remove(keys)
        if removed and not opts.multi:
            return removed

        for record in self._containers(db):
            kept = []
            dropped = 0
            for item in record.items:
                if matches(item, query) and (opts.multi or dropped == 0):
                    dropped += 1
                else:
                    kept.append(item)
            if dropped:
                record.doc[self.collection] = kept
                db.replace(record.key, record.doc)
                removed += dropped
                if not opts.multi:
                    break
        return removed
