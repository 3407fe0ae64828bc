from pathlib import Path
import copy
import json
import logging
import threading
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..errors import BackendIOError, DuplicateKeyError
from .query import matches

logger = logging.getLogger(__name__)

Entry = Tuple[str, Dict[str, Any]]


def _index_key(value: Any):
    # keeps True and 1 in separate buckets
    return (isinstance(value, bool), value)


class _Index:
    def __init__(self, field: str, unique: bool = False):
        self.field = field
        self.unique = unique
        self.entries: Dict[Any, set] = {}
        self.unindexed: set = set()

    def rebuild(self, docs: Dict[str, Dict[str, Any]]):
        self.entries = {}
        self.unindexed = set()
        for key, doc in docs.items():
            if self.field not in doc:
                continue
            value = doc[self.field]
            try:
                self.entries.setdefault(_index_key(value), set()).add(key)
            except TypeError:
                self.unindexed.add(key)

    def lookup(self, value: Any) -> Optional[set]:
        try:
            hit = self.entries.get(_index_key(value), set())
        except TypeError:
            return None
        return hit | self.unindexed


class JsonCollection:
    """
    One schema-less document collection persisted as a JSON file.

    The file maps an internal key to each document; the key never appears
    inside the document itself. All operations on a collection are
    serialised by its lock, and every write rewrites the whole file.
    """

    def __init__(self, path: Path, name: str):
        self.path = Path(path)
        self.name = name
        self._lock = threading.RLock()
        self._docs: Optional[Dict[str, Dict[str, Any]]] = None
        self._indexes: Dict[str, _Index] = {}

    # --- persistence --------------------------------------------------

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._docs is not None:
            return self._docs
        try:
            if self.path.exists() and self.path.stat().st_size > 0:
                with self.path.open("r", encoding="utf-8") as f:
                    docs = json.load(f)
                if not isinstance(docs, dict):
                    raise ValueError("collection file must hold a JSON object")
            else:
                docs = {}
                self._save(docs)
        except (OSError, ValueError) as exc:
            logger.error("Failed to load collection %s from %s", self.name, self.path)
            raise BackendIOError(self.name, "load", exc) from exc
        self._docs = docs
        self._reindex()
        return docs

    def _save(self, docs: Dict[str, Dict[str, Any]]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(docs, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write collection %s to %s", self.name, self.path)
            raise BackendIOError(self.name, "write", exc) from exc

    def _commit(self, docs: Dict[str, Dict[str, Any]]):
        self._save(docs)
        self._docs = docs
        self._reindex()

    def _reindex(self):
        for index in self._indexes.values():
            index.rebuild(self._docs or {})

    def _check_unique(self, docs: Dict[str, Dict[str, Any]]):
        for index in self._indexes.values():
            if not index.unique:
                continue
            seen: Dict[Any, str] = {}
            for key, doc in docs.items():
                if index.field not in doc:
                    continue
                value = doc[index.field]
                try:
                    marker = _index_key(value)
                    hash(marker)
                except TypeError:
                    continue
                if marker in seen:
                    raise DuplicateKeyError(self.name, index.field, value)
                seen[marker] = key

    # --- public API ---------------------------------------------------

    def ensure_index(self, field: str, unique: bool = False):
        with self._lock:
            if field in self._indexes:
                return
            index = _Index(field, unique)
            self._indexes[field] = index
            docs = self._load()
            try:
                if unique:
                    self._check_unique(docs)
            except DuplicateKeyError:
                del self._indexes[field]
                raise
            index.rebuild(docs)

    @property
    def indexes(self) -> Dict[str, bool]:
        return {name: index.unique for name, index in self._indexes.items()}

    def items(self) -> List[Entry]:
        with self._lock:
            return [(k, copy.deepcopy(v)) for k, v in self._load().items()]

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._load().get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def _candidates(self, query: Optional[Dict[str, Any]]) -> Iterable[str]:
        docs = self._load()
        for field, value in (query or {}).items():
            index = self._indexes.get(field)
            if index is None or isinstance(value, (dict, list)):
                continue
            hit = index.lookup(value)
            if hit is not None:
                return [k for k in docs if k in hit]
        return list(docs)

    def find(self, query: Optional[Dict[str, Any]] = None) -> List[Entry]:
        with self._lock:
            docs = self._load()
            return [
                (k, copy.deepcopy(docs[k]))
                for k in self._candidates(query)
                if matches(docs[k], query)
            ]

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        with self._lock:
            docs = self._load()
            return sum(1 for k in self._candidates(query) if matches(docs[k], query))

    def insert(self, docs: List[Dict[str, Any]]) -> List[Entry]:
        """Insert all documents or none of them."""
        with self._lock:
            current = dict(self._load())
            inserted = []
            for doc in docs:
                key = uuid.uuid4().hex
                current[key] = copy.deepcopy(doc)
                inserted.append((key, copy.deepcopy(doc)))
            self._check_unique(current)
            self._commit(current)
            return inserted

    def replace(self, key: str, doc: Dict[str, Any]) -> bool:
        return self.replace_many({key: doc}) == 1

    def replace_many(self, docs: Dict[str, Dict[str, Any]]) -> int:
        """Overwrite existing documents by key; unknown keys are ignored."""
        with self._lock:
            current = dict(self._load())
            replaced = 0
            for key, doc in docs.items():
                if key in current:
                    current[key] = copy.deepcopy(doc)
                    replaced += 1
            if replaced:
                self._check_unique(current)
                self._commit(current)
            return replaced

    def remove(self, keys: Iterable[str]) -> int:
        with self._lock:
            current = dict(self._load())
            removed = 0
            for key in keys:
                if current.pop(key, None) is not None:
                    removed += 1
            if removed:
                self._commit(current)
            return removed

    def remove_all(self) -> int:
        with self._lock:
            removed = len(self._load())
            self._commit({})
            return removed


class JsonStore:
    """Directory of JSON collections: one file per collection."""

    def __init__(self, data_dir: Path, suffix: str = ".db"):
        self.data_dir = Path(data_dir)
        self.suffix = suffix
        self._collections: Dict[str, JsonCollection] = {}
        self._lock = threading.Lock()

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}{self.suffix}"

    def collection(self, name: str) -> JsonCollection:
        with self._lock:
            handle = self._collections.get(name)
            if handle is None:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                handle = JsonCollection(self._path(name), name)
                self._collections[name] = handle
            return handle

    def files(self) -> List[Path]:
        if not self.data_dir.is_dir():
            return []
        return sorted(self.data_dir.glob(f"*{self.suffix}"))

    def drop_all(self) -> int:
        """Delete every collection file and forget open handles."""
        with self._lock:
            removed = 0
            for p in self.files():
                try:
                    p.unlink()
                except OSError as exc:
                    logger.error("Failed to delete collection file %s", p)
                    raise BackendIOError(p.stem, "drop", exc) from exc
                removed += 1
            self._collections.clear()
            return removed
