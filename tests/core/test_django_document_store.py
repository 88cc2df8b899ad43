from __future__ import annotations

from datetime import datetime, timezone

import pytest
from django.db import transaction

from core.store.django_store import DjangoDocumentStore
from core.store.errors import DocumentNotFound
from core.store.models import StoredDocument
from core.store.protocol import DESCENDING, BatchOperation

pytestmark = pytest.mark.django_db(transaction=True)

ORDERS = "artifacts/shop/public/data/orders"
TRANSACTIONS = "artifacts/shop/public/data/transactions"
NOW = datetime(2025, 4, 10, 9, 0, tzinfo=timezone.utc)


def test_create_and_read_back_document() -> None:
    store = DjangoDocumentStore()
    doc_id = store.create(ORDERS, {"billNumber": "TH-1", "orderDate": NOW})

    doc = store.get_once(ORDERS, doc_id)

    assert doc["id"] == doc_id
    assert doc["billNumber"] == "TH-1"
    assert StoredDocument.objects.filter(collection=ORDERS).count() == 1


def test_update_merges_top_level_fields() -> None:
    store = DjangoDocumentStore()
    doc_id = store.create(ORDERS, {"billNumber": "TH-1", "notes": "old"})

    store.update(ORDERS, doc_id, {"notes": "new"})

    doc = store.get_once(ORDERS, doc_id)
    assert doc["notes"] == "new"
    assert doc["billNumber"] == "TH-1"


def test_update_missing_document_raises() -> None:
    with pytest.raises(DocumentNotFound):
        DjangoDocumentStore().update(ORDERS, "missing", {"notes": "x"})


def test_failed_batch_rolls_back_every_operation() -> None:
    store = DjangoDocumentStore()

    with pytest.raises(DocumentNotFound):
        store.atomic_batch([
            BatchOperation.set(ORDERS, "o-1", {"billNumber": "TH-1"}),
            BatchOperation.update(TRANSACTIONS, "missing", {"amount": 1}),
        ])

    assert store.get_once(ORDERS, "o-1") is None


def test_subscribers_receive_snapshots_after_commit() -> None:
    store = DjangoDocumentStore()
    snapshots = []
    store.subscribe(ORDERS, "orderDate", DESCENDING, snapshots.append)

    store.atomic_batch([
        BatchOperation.set(ORDERS, "o-1", {"billNumber": "TH-1", "orderDate": NOW}),
        BatchOperation.set(TRANSACTIONS, "t-1", {"amount": 500, "orderRef": "o-1"}),
    ])

    assert len(snapshots) == 2
    assert snapshots[-1][0]["billNumber"] == "TH-1"
    assert store.query(TRANSACTIONS, {"orderRef": "o-1"})[0]["id"] == "t-1"


def test_no_snapshot_until_outer_transaction_commits() -> None:
    store = DjangoDocumentStore()
    snapshots = []
    store.subscribe(ORDERS, "orderDate", DESCENDING, snapshots.append)

    with transaction.atomic():
        store.create(ORDERS, {"billNumber": "TH-1"})
        assert len(snapshots) == 1

    assert len(snapshots) == 2


def test_timestamps_round_trip_as_sortable_values() -> None:
    store = DjangoDocumentStore()
    store.create(ORDERS, {"billNumber": "old", "orderDate": datetime(2024, 1, 1, tzinfo=timezone.utc)})
    store.create(ORDERS, {"billNumber": "new", "orderDate": NOW})
    store.create(ORDERS, {"billNumber": "undated"})
    snapshots = []

    store.subscribe(ORDERS, "orderDate", DESCENDING, snapshots.append)

    assert [d["billNumber"] for d in snapshots[0]] == ["new", "old", "undated"]


def test_delete_removes_document() -> None:
    store = DjangoDocumentStore()
    doc_id = store.create(ORDERS, {"billNumber": "TH-1"})

    store.delete(ORDERS, doc_id)

    assert store.get_once(ORDERS, doc_id) is None
