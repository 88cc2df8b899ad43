"""
Tests for core.context.live and core.caching — live snapshots and memoized views.
"""

import pytest
from datetime import datetime, timedelta, timezone

from core.auth.provider import InMemoryPrincipalProvider, NotAuthenticatedError, Principal
from core.caching import DerivationMemo
from core.config.rules import ShopRules
from core.context import LiveCollections
from core.store import InMemoryDocumentStore, StoreError
from core.time.clock import FixedClock

NOW = datetime(2025, 4, 10, 12, 0, tzinfo=timezone.utc)
RULES = ShopRules(app_id="shop", time_zone="UTC")
BASE = "artifacts/shop/public/data"


def signed_in():
    return InMemoryPrincipalProvider(Principal(principal_id="owner-1"))


def live_for(store, memo=None):
    live = LiveCollections(
        store=store, principal_provider=signed_in(), rules=RULES,
        clock=FixedClock(NOW), memo=memo,
    )
    live.open()
    return live


def add_order(store, bill, *, total=0, pending=0, order_date=NOW, items=()):
    return store.create(f"{BASE}/orders", {
        "billNumber": bill,
        "orderDate": order_date,
        "customer": {"name": "Ravi", "number": "98765"},
        "people": [{"name": "Ravi", "items": list(items)}],
        "payment": {"total": total, "pending": pending},
    })


class TestDerivationMemo:
    def test_hit_while_revision_unchanged(self):
        memo = DerivationMemo()
        calls = []
        compute = lambda: calls.append(1) or len(calls)

        assert memo.get_or_compute("k", (1,), compute) == 1
        assert memo.get_or_compute("k", (1,), compute) == 1
        assert memo.get_or_compute("k", (2,), compute) == 2
        assert (memo.stats.hits, memo.stats.misses) == (1, 2)

    def test_invalidate_by_tag(self):
        memo = DerivationMemo()
        memo.get_or_compute("a", (0,), lambda: 1, tags=("orders",))
        memo.get_or_compute("b", (0,), lambda: 2, tags=("workers",))
        assert memo.invalidate_by_tag("orders") == 1
        assert memo.size == 1

    def test_lru_eviction(self):
        memo = DerivationMemo(max_size=2)
        memo.get_or_compute("a", (0,), lambda: 1)
        memo.get_or_compute("b", (0,), lambda: 2)
        memo.get_or_compute("a", (0,), lambda: 99)
        memo.get_or_compute("c", (0,), lambda: 3)
        assert memo.stats.evictions == 1
        assert memo.get_or_compute("a", (0,), lambda: 99) == 1

    def test_size_must_be_positive(self):
        with pytest.raises(ValueError):
            DerivationMemo(max_size=0)


class TestLiveCollections:
    def test_open_refused_without_principal(self):
        live = LiveCollections(
            store=InMemoryDocumentStore(), principal_provider=InMemoryPrincipalProvider(),
            rules=RULES, clock=FixedClock(NOW),
        )
        with pytest.raises(NotAuthenticatedError):
            live.open()
        assert not live.is_open

    def test_snapshots_follow_writes(self):
        store = InMemoryDocumentStore()
        live = live_for(store)
        assert live.orders == []

        add_order(store, "TH-1", order_date=datetime(2025, 4, 1, tzinfo=timezone.utc))
        add_order(store, "TH-2")

        assert [o.bill_number for o in live.orders] == ["TH-2", "TH-1"]
        assert live.revision("orders") == 3

    def test_catalog_sorted_by_name(self):
        store = InMemoryDocumentStore()
        store.create(f"{BASE}/tailoringItems", {"name": "Trouser"})
        store.create(f"{BASE}/tailoringItems", {"name": "Kurta"})
        live = live_for(store)
        assert [m.name for m in live.master_items] == ["Kurta", "Trouser"]

    def test_views_memoized_until_source_changes(self):
        store = InMemoryDocumentStore()
        memo = DerivationMemo()
        live = live_for(store, memo)
        add_order(store, "TH-1", total=800, pending=300)

        first = live.dashboard()
        assert live.dashboard() is first
        store.create(f"{BASE}/workers", {"name": "Suresh", "category": "Cutter"})
        assert live.dashboard() is first

        add_order(store, "TH-2", total=200, pending=200)
        second = live.dashboard()
        assert second is not first
        assert second.total_pending == 500

    def test_dashboard_keeps_one_entry_across_clock_readings(self):
        store = InMemoryDocumentStore()
        memo = DerivationMemo()
        live = live_for(store, memo)
        add_order(store, "TH-1", total=800, pending=300)

        first = live.dashboard(now=NOW)
        size = memo.size
        for minutes in range(1, 6):
            live.dashboard(now=NOW + timedelta(minutes=minutes))
        assert memo.size == size

        again = live.dashboard(now=NOW)
        assert again is not first
        assert live.dashboard(now=NOW) is again

    def test_error_keeps_last_snapshot(self):
        store = InMemoryDocumentStore()
        live = live_for(store)
        add_order(store, "TH-1")

        store.emit_error(f"{BASE}/orders", StoreError("permission-denied"))

        assert isinstance(live.last_error("orders"), StoreError)
        assert [o.bill_number for o in live.orders] == ["TH-1"]
        add_order(store, "TH-2")
        assert live.last_error("orders") is None

    def test_close_stops_delivery(self):
        store = InMemoryDocumentStore()
        live = live_for(store)
        live.close()
        add_order(store, "TH-1")
        assert not live.is_open
        assert live.orders == []

    def test_find_order_and_balance(self):
        store = InMemoryDocumentStore()
        live = live_for(store)
        order_id = add_order(store, "TH-1")
        store.create(f"{BASE}/transactions", {"type": "Income", "amount": 500, "date": NOW})
        store.create(f"{BASE}/transactions", {"type": "Expense", "amount": 120, "date": NOW})

        assert live.find_order(order_id).bill_number == "TH-1"
        assert live.find_order("nope") is None
        assert live.ledger_balance() == 380


class TestWorkerViews:
    def test_worker_ledger_with_live_payments(self):
        store = InMemoryDocumentStore()
        live = live_for(store)
        worker_id = store.create(f"{BASE}/workers", {"name": "Suresh", "category": "Cutter"})
        store.create(f"{BASE}/tailoringItems", {"name": "Shirt", "cuttingRate": 50})
        add_order(store, "TH-1", items=[{"name": "Shirt", "cutter": "Suresh"}])
        live.watch_worker_payments(worker_id)

        assert live.worker_ledger(worker_id).pending == 50

        store.create(f"{BASE}/workers/{worker_id}/payments", {"amount": 30, "date": NOW})
        ledger = live.worker_ledger(worker_id)
        assert (ledger.total_earned, ledger.paid, ledger.pending) == (50, 30, 20)
        assert [p.worker_id for p in live.worker_payments(worker_id)] == [worker_id]

        live.unwatch_worker_payments(worker_id)
        assert live.worker_payments(worker_id) == []

    def test_unknown_worker(self):
        live = live_for(InMemoryDocumentStore())
        assert live.worker_ledger("workers-404") is None

    def test_worker_options(self):
        store = InMemoryDocumentStore()
        live = live_for(store)
        store.create(f"{BASE}/workers", {"name": "Suresh", "category": "Cutter"})
        store.create(f"{BASE}/workers", {"name": "Meena", "category": "Sewer"})
        assert live.worker_options() == {"cutters": ["Suresh"], "sewers": ["Meena"]}
