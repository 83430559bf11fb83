"""Document storage and the gateway the core persists through."""

from qa_dashboard.storage.gateway import StoreGateway
from qa_dashboard.storage.json_store import JsonDocumentStore
from qa_dashboard.storage.store import COLLECTIONS, DocumentStore

__all__ = [
    "COLLECTIONS",
    "DocumentStore",
    "JsonDocumentStore",
    "StoreGateway",
]
