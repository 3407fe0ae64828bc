"""Bulk initialization of the document store from the fixtures."""
from __future__ import annotations

import logging
from typing import List

from .access import DataContext
from .base import CollectionName
from .fixtures import available_fixtures

logger = logging.getLogger(__name__)


def initialize_all_collections(context: DataContext) -> List[str]:
    """Open (and seed when empty) every known collection that has a fixture file."""
    present = set(available_fixtures(context.fixtures_dir))
    names = [c.value for c in CollectionName if c.value in present]
    logger.info("Found %d collections to initialize.", len(names))
    for name in names:
        try:
            context.document_source(name).open_collection()
        except Exception:
            logger.exception("Error initializing collection %s", name)
            raise
        logger.debug("Collection initialized: %s", name)
    logger.info("All collections initialized.")
    return names


def rebuild_document_store(context: DataContext) -> List[str]:
    """Delete all collection files and reseed everything from the fixtures."""
    clear_document_store(context)
    return initialize_all_collections(context)


def clear_document_store(context: DataContext) -> int:
    """Delete every collection file; handles reopen (and reseed) on next access."""
    return context.drop_document_store()
