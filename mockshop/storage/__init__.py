from .access import DOCUMENT_STORE, SNAPSHOT, DataContext, get_data_source
from .base import CollectionName, DataSource
from .document_source import DocumentStoreDataSource
from .json_store import JsonCollection, JsonStore
from .query import DeleteOptions, FindOptions, UpdateOptions
from .snapshot_source import StaticSnapshotDataSource

__all__ = [
    "CollectionName",
    "DataContext",
    "DataSource",
    "DeleteOptions",
    "DocumentStoreDataSource",
    "DOCUMENT_STORE",
    "FindOptions",
    "JsonCollection",
    "JsonStore",
    "SNAPSHOT",
    "StaticSnapshotDataSource",
    "UpdateOptions",
    "get_data_source",
]
