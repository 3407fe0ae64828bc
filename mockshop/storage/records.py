"""
Stored record shapes.

Older fixtures were imported as a single document holding every entity
under a key named after the collection. Such a record is a ``Container``;
everything else is ``Plain``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union


@dataclass
class Plain:
    key: str
    doc: Dict[str, Any]


@dataclass
class Container:
    key: str
    collection: str
    doc: Dict[str, Any]

    @property
    def items(self) -> List[Dict[str, Any]]:
        return self.doc[self.collection]


StorageRecord = Union[Plain, Container]


def is_container(doc: Any, collection: str) -> bool:
    return isinstance(doc, dict) and isinstance(doc.get(collection), list)


def classify(key: str, doc: Dict[str, Any], collection: str) -> StorageRecord:
    if is_container(doc, collection):
        return Container(key, collection, doc)
    return Plain(key, doc)
