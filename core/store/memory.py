"""
Tailorbook Document Store — In-Memory Implementation
======================================================
Deterministic store for tests and local runs.

Snapshot delivery:
1. subscribe() delivers the current ordered snapshot immediately
2. Every successful write re-delivers each affected collection
3. Subscriber exceptions are caught per handler and logged
4. A failed write delivers nothing

Failure injection:
    store.fail_next_write(StoreWriteError("offline"))
    store.emit_error(collection, exc)   # drives on_error callbacks
"""

from __future__ import annotations

import copy
import itertools
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.store.errors import DocumentNotFound, StoreWriteError
from core.store.protocol import (
    OP_DELETE,
    OP_SET,
    OP_UPDATE,
    BatchOperation,
    ErrorCallback,
    SnapshotCallback,
    VALID_DIRECTIONS,
    matches,
    order_documents,
)

logger = logging.getLogger("tailorbook.store")


class InMemorySubscription:
    def __init__(
        self,
        store: "InMemoryDocumentStore",
        collection: str,
        order_by: str,
        direction: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback],
    ):
        self._store = store
        self.collection = collection
        self.order_by = order_by
        self.direction = direction
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._store._detach(self)


class InMemoryDocumentStore:
    """Dict-backed document store with synchronous snapshot delivery."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, dict]] = {}
        self._subscriptions: Dict[str, List[InMemorySubscription]] = {}
        self._counter = itertools.count(1)
        self._pending_failures: List[Exception] = []
        self.write_count = 0

    # ── failure injection ─────────────────────────────────────

    def fail_next_write(self, error: Optional[Exception] = None) -> None:
        self._pending_failures.append(error or StoreWriteError("Injected write failure."))

    def emit_error(self, collection: str, error: Exception) -> None:
        for sub in list(self._subscriptions.get(collection, [])):
            if sub.on_error is not None:
                sub.on_error(error)

    # ── reads ─────────────────────────────────────────────────

    def new_id(self, collection: str) -> str:
        return f"{collection.rsplit('/', 1)[-1]}-{next(self._counter)}"

    def get_once(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self._collections.get(collection, {}).get(doc_id)
        if doc is None:
            return None
        return self._materialize(doc_id, doc)

    def query(self, collection: str, where: Mapping[str, Any]) -> List[dict]:
        return [
            self._materialize(doc_id, doc)
            for doc_id, doc in self._collections.get(collection, {}).items()
            if matches(doc, where)
        ]

    def documents(self, collection: str) -> List[dict]:
        """Every document of a collection in insertion order."""
        return self.query(collection, {})

    def subscribe(
        self,
        collection: str,
        order_by: str,
        direction: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> InMemorySubscription:
        if direction not in VALID_DIRECTIONS:
            raise ValueError(f"direction must be one of {sorted(VALID_DIRECTIONS)}.")
        sub = InMemorySubscription(
            self, collection, order_by, direction, on_snapshot, on_error,
        )
        self._subscriptions.setdefault(collection, []).append(sub)
        self._deliver(sub)
        return sub

    # ── writes ────────────────────────────────────────────────

    def create(self, collection: str, document: Mapping[str, Any]) -> str:
        doc_id = self.new_id(collection)
        self.atomic_batch([BatchOperation.set(collection, doc_id, document)])
        return doc_id

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        self.atomic_batch([BatchOperation.update(collection, doc_id, fields)])

    def delete(self, collection: str, doc_id: str) -> None:
        self.atomic_batch([BatchOperation.delete(collection, doc_id)])

    def atomic_batch(self, operations: Iterable[BatchOperation]) -> None:
        operations = list(operations)
        if self._pending_failures:
            error = self._pending_failures.pop(0)
            logger.warning(f"Write rejected ({len(operations)} ops): {error}")
            raise error

        # Stage on a copy of every touched collection; swap in only if all apply.
        touched = {op.collection for op in operations}
        staged = {name: dict(self._collections.get(name, {})) for name in touched}
        for op in operations:
            target = staged[op.collection]
            if op.kind == OP_SET:
                target[op.doc_id] = copy.deepcopy(dict(op.data))
            elif op.kind == OP_UPDATE:
                if op.doc_id not in target:
                    raise DocumentNotFound(op.collection, op.doc_id)
                merged = dict(target[op.doc_id])
                merged.update(copy.deepcopy(dict(op.data)))
                target[op.doc_id] = merged
            elif op.kind == OP_DELETE:
                target.pop(op.doc_id, None)

        self._collections.update(staged)
        self.write_count += 1
        logger.debug(f"Batch applied: {len(operations)} ops on {sorted(touched)}")
        for name in sorted(touched):
            self._notify(name)

    # ── delivery ──────────────────────────────────────────────

    def _materialize(self, doc_id: str, doc: dict) -> dict:
        result = copy.deepcopy(doc)
        result["id"] = doc_id
        return result

    def _snapshot(self, sub: InMemorySubscription) -> List[dict]:
        docs = [
            self._materialize(doc_id, doc)
            for doc_id, doc in self._collections.get(sub.collection, {}).items()
        ]
        return order_documents(docs, sub.order_by, sub.direction)

    def _deliver(self, sub: InMemorySubscription) -> None:
        try:
            sub.on_snapshot(self._snapshot(sub))
        except Exception as exc:
            logger.error(
                f"Snapshot handler failed for '{sub.collection}': {exc}",
                exc_info=True,
            )

    def _notify(self, collection: str) -> None:
        for sub in list(self._subscriptions.get(collection, [])):
            if sub.active:
                self._deliver(sub)

    def _detach(self, sub: InMemorySubscription) -> None:
        subs = self._subscriptions.get(sub.collection, [])
        if sub in subs:
            subs.remove(sub)
