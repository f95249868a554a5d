"""Document store adapters.

Handlers and the rate limiter depend on ``AbstractDocumentStore`` only, so the
backing engine (in-memory, JSON snapshot, or a hosted document database) can
change without touching the HTTP layer.
"""

from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.adapters.store.factory import create_document_store
from portfolio_api.adapters.store.in_memory import InMemoryDocumentStore
from portfolio_api.adapters.store.json_file import JsonFileDocumentStore

__all__ = [
    "AbstractDocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "create_document_store",
]
