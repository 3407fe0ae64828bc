"""
Flattening legacy container records into one document per entity.

Running it on an already flat collection does nothing.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from .access import DataContext
from .base import CollectionName, collection_name
from .records import Container, classify

logger = logging.getLogger(__name__)


def normalize_collection(context: DataContext, collection) -> int:
    """Returns the number of entities extracted from container records."""
    name = collection_name(collection)
    source = context.document_source(name)
    db = source.open_collection()

    containers = [
        r for r in (classify(k, d, name) for k, d in db.items())
        if isinstance(r, Container)
    ]
    if not containers:
        logger.info("%s database structure is already normalized.", name)
        return 0

    logger.info("Normalizing %s database structure...", name)
    items = [item for record in containers for item in record.items]
    # insert first so a failed insert leaves the containers in place
    db.insert(items)
    db.remove(record.key for record in containers)
    logger.info("%s database structure normalized. Added %d items.", name, len(items))
    return len(items)


def normalize_all_collections(context: DataContext, collections: Optional[Iterable] = None) -> Dict[str, int]:
    names = [collection_name(c) for c in (collections or list(CollectionName))]
    results: Dict[str, int] = {}
    for name in names:
        try:
            results[name] = normalize_collection(context, name)
        except Exception:
            logger.exception("Error normalizing collection %s", name)
            raise
    logger.info("All collections normalized.")
    return results
