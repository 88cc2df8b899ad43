"""
Tailorbook Document Store — Public API
========================================
The Django-backed store lives in core.store.django_store and is
imported only once the app registry is ready.
"""

from core.store.errors import DocumentNotFound, StoreError, StoreWriteError
from core.store.memory import InMemoryDocumentStore, InMemorySubscription
from core.store.protocol import (
    ASCENDING,
    DESCENDING,
    BatchOperation,
    DocumentStore,
    Subscription,
    matches,
    order_documents,
)

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "BatchOperation",
    "DocumentNotFound",
    "DocumentStore",
    "InMemoryDocumentStore",
    "InMemorySubscription",
    "StoreError",
    "StoreWriteError",
    "Subscription",
    "matches",
    "order_documents",
]
