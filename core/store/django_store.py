"""
Tailorbook Document Store — Django Implementation
===================================================
Documents live in one table (StoredDocument), addressed by
(collection, doc_id). Batches run inside transaction.atomic().

Write flow:
    1. Apply every operation inside one transaction
    2. On any failure → roll back, raise StoreWriteError, notify nobody
    3. On commit → re-deliver each touched collection to its subscribers

Subscriptions are process-local: a write made by another process is
seen on the next delivery triggered here, or on resubscribe.
Timestamps come back as ISO strings; readers parse them tolerantly.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.db import DatabaseError, transaction

from core.store.errors import DocumentNotFound, StoreWriteError
from core.store.models import StoredDocument
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


class DjangoSubscription:
    def __init__(self, store, collection, order_by, direction, on_snapshot, on_error):
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


def _as_document(row: StoredDocument) -> dict:
    document = copy.deepcopy(row.data) if isinstance(row.data, dict) else {}
    document["id"] = row.doc_id
    return document


class DjangoDocumentStore:
    """DocumentStore backed by the StoredDocument table."""

    def __init__(self):
        self._subscriptions: Dict[str, List[DjangoSubscription]] = {}

    # ── reads ─────────────────────────────────────────────────

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex[:20]

    def get_once(self, collection: str, doc_id: str) -> Optional[dict]:
        row = StoredDocument.objects.filter(collection=collection, doc_id=doc_id).first()
        return _as_document(row) if row is not None else None

    def query(self, collection: str, where: Mapping[str, Any]) -> List[dict]:
        rows = StoredDocument.objects.filter(collection=collection).order_by("id")
        documents = [_as_document(row) for row in rows]
        return [doc for doc in documents if matches(doc, where)]

    def subscribe(
        self,
        collection: str,
        order_by: str,
        direction: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> DjangoSubscription:
        if direction not in VALID_DIRECTIONS:
            raise ValueError(f"direction must be one of {sorted(VALID_DIRECTIONS)}.")
        sub = DjangoSubscription(self, collection, order_by, direction, on_snapshot, on_error)
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
        touched = sorted({op.collection for op in operations})
        try:
            with transaction.atomic():
                for op in operations:
                    self._apply(op)
                transaction.on_commit(lambda: self._notify_after_commit(touched))
        except DocumentNotFound:
            raise
        except DatabaseError as exc:
            logger.error(
                f"Batch of {len(operations)} ops on {touched} rolled back: {exc}",
                exc_info=True,
            )
            raise StoreWriteError(f"Transaction aborted: {exc}") from exc

    def _apply(self, op: BatchOperation) -> None:
        if op.kind == OP_SET:
            StoredDocument.objects.update_or_create(
                collection=op.collection,
                doc_id=op.doc_id,
                defaults={"data": copy.deepcopy(dict(op.data))},
            )
        elif op.kind == OP_UPDATE:
            row = (
                StoredDocument.objects.select_for_update()
                .filter(collection=op.collection, doc_id=op.doc_id)
                .first()
            )
            if row is None:
                raise DocumentNotFound(op.collection, op.doc_id)
            data = dict(row.data) if isinstance(row.data, dict) else {}
            data.update(copy.deepcopy(dict(op.data)))
            row.data = data
            row.save(update_fields=["data", "updated_at"])
        elif op.kind == OP_DELETE:
            StoredDocument.objects.filter(
                collection=op.collection, doc_id=op.doc_id,
            ).delete()

    # ── delivery ──────────────────────────────────────────────

    def _deliver(self, sub: DjangoSubscription) -> None:
        try:
            rows = StoredDocument.objects.filter(collection=sub.collection).order_by("id")
            snapshot = order_documents(
                [_as_document(row) for row in rows], sub.order_by, sub.direction,
            )
        except DatabaseError as exc:
            logger.error(f"Snapshot read failed for '{sub.collection}': {exc}", exc_info=True)
            if sub.on_error is not None:
                sub.on_error(exc)
            return
        try:
            sub.on_snapshot(snapshot)
        except Exception as exc:
            logger.error(
                f"Snapshot handler failed for '{sub.collection}': {exc}",
                exc_info=True,
            )

    def _notify_after_commit(self, collections: List[str]) -> None:
        for name in collections:
            for sub in list(self._subscriptions.get(name, [])):
                if sub.active:
                    self._deliver(sub)

    def _detach(self, sub: DjangoSubscription) -> None:
        subs = self._subscriptions.get(sub.collection, [])
        if sub in subs:
            subs.remove(sub)
