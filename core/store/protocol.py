"""
Tailorbook Document Store — Collaborator Contract
===================================================
The core consumes the hosted document store only through this
protocol:

    subscribe   → ordered snapshots of one collection until unsubscribed
    create      → store-assigned id
    update      → replaces the named top-level fields only (no deep merge)
    delete      → immediate, irreversible
    atomic_batch → all-or-nothing multi-document write
    get_once    → one document or None

Delivery is eventual and at-least-once. Snapshots of one collection
arrive in write order; there is no ordering across collections.

Every document handed to a caller is a fresh dict carrying its ``id``.
Callers may mutate what they receive without affecting the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol

from core.time.temporal import parse_timestamp


ASCENDING = "asc"
DESCENDING = "desc"
VALID_DIRECTIONS = frozenset({ASCENDING, DESCENDING})

OP_SET = "SET"
OP_UPDATE = "UPDATE"
OP_DELETE = "DELETE"

SnapshotCallback = Callable[[List[dict]], None]
ErrorCallback = Callable[[Exception], None]


# ══════════════════════════════════════════════════════════════
# BATCH OPERATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BatchOperation:
    """One write inside an atomic batch."""

    kind: str
    collection: str
    doc_id: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in (OP_SET, OP_UPDATE, OP_DELETE):
            raise ValueError(f"Unknown batch operation kind: {self.kind}")
        if not self.collection:
            raise ValueError("collection must be non-empty.")
        if not self.doc_id:
            raise ValueError("doc_id must be non-empty.")

    @classmethod
    def set(cls, collection: str, doc_id: str, data: Mapping[str, Any]) -> "BatchOperation":
        return cls(kind=OP_SET, collection=collection, doc_id=doc_id, data=dict(data))

    @classmethod
    def update(cls, collection: str, doc_id: str, fields: Mapping[str, Any]) -> "BatchOperation":
        return cls(kind=OP_UPDATE, collection=collection, doc_id=doc_id, data=dict(fields))

    @classmethod
    def delete(cls, collection: str, doc_id: str) -> "BatchOperation":
        return cls(kind=OP_DELETE, collection=collection, doc_id=doc_id)


# ══════════════════════════════════════════════════════════════
# PROTOCOLS
# ══════════════════════════════════════════════════════════════

class Subscription(Protocol):
    @property
    def active(self) -> bool:
        ...

    def unsubscribe(self) -> None:
        ...


class DocumentStore(Protocol):
    def new_id(self, collection: str) -> str:
        ...

    def subscribe(
        self,
        collection: str,
        order_by: str,
        direction: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        ...

    def create(self, collection: str, document: Mapping[str, Any]) -> str:
        ...

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def atomic_batch(self, operations: Iterable[BatchOperation]) -> None:
        ...

    def get_once(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def query(self, collection: str, where: Mapping[str, Any]) -> List[dict]:
        ...


# ══════════════════════════════════════════════════════════════
# SHARED HELPERS
# ══════════════════════════════════════════════════════════════

def _sort_key(value: Any):
    # Numbers and timestamps share one rank; ISO strings written by the
    # Django store sort as the instants they encode.
    if isinstance(value, (int, float)):
        return (0, float(value))
    if isinstance(value, str) and not (len(value) >= 10 and value[4:5] == "-"):
        return (1, value)
    moment = parse_timestamp(value)
    if moment is None:
        return (1, value) if isinstance(value, str) else (2, repr(value))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (0, moment.timestamp())


def order_documents(documents: Iterable[dict], order_by: str, direction: str) -> List[dict]:
    """
    Sort documents on one top-level field.

    Documents without the field keep their encounter order and go last.
    Comparison never crosses value types.
    """
    if direction not in VALID_DIRECTIONS:
        raise ValueError(f"direction must be one of {sorted(VALID_DIRECTIONS)}.")
    present, missing = [], []
    for doc in documents:
        if doc.get(order_by) is None:
            missing.append(doc)
        else:
            present.append(doc)
    present.sort(key=lambda d: _sort_key(d[order_by]), reverse=direction == DESCENDING)
    return present + missing


def matches(document: Mapping[str, Any], where: Mapping[str, Any]) -> bool:
    """Equality filter on top-level fields."""
    return all(document.get(key) == value for key, value in where.items())

