"""
Tailorbook Context — Live Collections
=======================================
Explicit, injected handles to the shop's live collections. Each handle
is kept fresh by one store subscription:

    orders           orderDate   desc
    tailoringItems   name        asc
    workers          name        asc
    transactions     date        desc
    additionalFees   description asc

A failed subscription is logged and the collection keeps its last
snapshot (empty until the first one arrives). Derived views are
memoized against the snapshot revisions they read, so an unchanged
collection never triggers recomputation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.auth.provider import PrincipalProvider, collection_path
from core.caching import DerivationMemo
from core.config.rules import ShopRules
from core.store.protocol import ASCENDING, DESCENDING, DocumentStore, Subscription
from core.time.clock import Clock
from engines.catalog.schemas import (
    FeeDefinition,
    MasterItem,
    Transaction,
    Worker,
    WorkerPayment,
)
from engines.orders.schemas import Order
from projections.customers import CustomerSummary, customer_directory
from projections.dashboard import DashboardSummary, build_dashboard
from projections.ledger import ledger_balance
from projections.workers import WorkerLedger, worker_ledger, worker_options

logger = logging.getLogger("tailorbook.context")

ORDERS = "orders"
MASTER_ITEMS = "tailoringItems"
WORKERS = "workers"
TRANSACTIONS = "transactions"
FEE_DEFINITIONS = "additionalFees"

LIVE_COLLECTIONS: Dict[str, Tuple[str, str]] = {
    ORDERS: ("orderDate", DESCENDING),
    MASTER_ITEMS: ("name", ASCENDING),
    WORKERS: ("name", ASCENDING),
    TRANSACTIONS: ("date", DESCENDING),
    FEE_DEFINITIONS: ("description", ASCENDING),
}


def _payments_key(worker_id: str) -> str:
    return f"{WORKERS}/{worker_id}/payments"


class LiveCollections:
    """
    Usage:
        live = LiveCollections(store=store, principal_provider=provider,
                               rules=rules, clock=clock)
        live.open()
        live.dashboard().total_pending
        live.close()
    """

    def __init__(self, *, store: DocumentStore,
                 principal_provider: PrincipalProvider,
                 rules: ShopRules,
                 clock: Clock,
                 memo: Optional[DerivationMemo] = None):
        self._store = store
        self._principal_provider = principal_provider
        self._rules = rules
        self._clock = clock
        self._memo = memo or DerivationMemo()
        self._snapshots: Dict[str, List[dict]] = {name: [] for name in LIVE_COLLECTIONS}
        self._revisions: Dict[str, int] = {name: 0 for name in LIVE_COLLECTIONS}
        self._errors: Dict[str, Exception] = {}
        self._subscriptions: Dict[str, Subscription] = {}

    # ── lifecycle ─────────────────────────────────────────────

    def open(self) -> None:
        """Subscribe to every live collection. Refuses without a principal."""
        for name, (order_by, direction) in LIVE_COLLECTIONS.items():
            if name in self._subscriptions:
                continue
            path = collection_path(self._principal_provider, self._rules, name)
            self._subscriptions[name] = self._store.subscribe(
                path, order_by, direction,
                self._snapshot_handler(name),
                self._error_handler(name),
            )
        logger.info(f"Live collections open for app '{self._rules.app_id}'")

    def watch_worker_payments(self, worker_id: str) -> None:
        """Keep one worker's payment history live (date desc)."""
        key = _payments_key(worker_id)
        if key in self._subscriptions:
            return
        self._snapshots.setdefault(key, [])
        self._revisions.setdefault(key, 0)
        path = collection_path(self._principal_provider, self._rules, WORKERS)
        self._subscriptions[key] = self._store.subscribe(
            f"{path}/{worker_id}/payments", "date", DESCENDING,
            self._snapshot_handler(key),
            self._error_handler(key),
        )

    def unwatch_worker_payments(self, worker_id: str) -> None:
        key = _payments_key(worker_id)
        subscription = self._subscriptions.pop(key, None)
        if subscription is not None:
            subscription.unsubscribe()
        self._snapshots.pop(key, None)
        self._revisions.pop(key, None)
        self._memo.invalidate_by_tag(key)

    def close(self) -> None:
        for subscription in self._subscriptions.values():
            subscription.unsubscribe()
        self._subscriptions.clear()
        self._memo.clear()
        logger.info("Live collections closed")

    @property
    def is_open(self) -> bool:
        return bool(self._subscriptions)

    # ── delivery ──────────────────────────────────────────────

    def _snapshot_handler(self, name: str) -> Callable[[List[dict]], None]:
        def on_snapshot(documents: List[dict]) -> None:
            self._snapshots[name] = list(documents)
            self._revisions[name] = self._revisions.get(name, 0) + 1
            self._errors.pop(name, None)
            self._memo.invalidate_by_tag(name)
            logger.debug(f"Snapshot '{name}': {len(documents)} document(s)")
        return on_snapshot

    def _error_handler(self, name: str) -> Callable[[Exception], None]:
        def on_error(error: Exception) -> None:
            self._errors[name] = error
            logger.error(
                f"Subscription to '{name}' failed; keeping last snapshot "
                f"({len(self._snapshots.get(name, []))} document(s)): {error}",
                exc_info=error,
            )
        return on_error

    def last_error(self, name: str) -> Optional[Exception]:
        return self._errors.get(name)

    def revision(self, name: str) -> int:
        return self._revisions.get(name, 0)

    def _derive(self, key: Any, sources: Tuple[str, ...], compute: Callable[[], Any],
                extra: Tuple[Any, ...] = ()) -> Any:
        revision = tuple(self._revisions.get(name, 0) for name in sources) + extra
        return self._memo.get_or_compute(key, revision, compute, tags=sources)

    # ── typed collections ─────────────────────────────────────

    @property
    def orders(self) -> List[Order]:
        return self._derive(
            "orders", (ORDERS,),
            lambda: [Order.from_document(d) for d in self._snapshots[ORDERS]],
        )

    @property
    def master_items(self) -> List[MasterItem]:
        return self._derive(
            "master_items", (MASTER_ITEMS,),
            lambda: [MasterItem.from_document(d) for d in self._snapshots[MASTER_ITEMS]],
        )

    @property
    def workers(self) -> List[Worker]:
        return self._derive(
            "workers", (WORKERS,),
            lambda: [Worker.from_document(d) for d in self._snapshots[WORKERS]],
        )

    @property
    def transactions(self) -> List[Transaction]:
        return self._derive(
            "transactions", (TRANSACTIONS,),
            lambda: [Transaction.from_document(d) for d in self._snapshots[TRANSACTIONS]],
        )

    @property
    def fee_definitions(self) -> List[FeeDefinition]:
        return self._derive(
            "fee_definitions", (FEE_DEFINITIONS,),
            lambda: [FeeDefinition.from_document(d) for d in self._snapshots[FEE_DEFINITIONS]],
        )

    def worker_payments(self, worker_id: str) -> List[WorkerPayment]:
        key = _payments_key(worker_id)
        return self._derive(
            ("worker_payments", worker_id), (key,),
            lambda: [
                WorkerPayment.from_document(d, worker_id=worker_id)
                for d in self._snapshots.get(key, [])
            ],
        )

    def find_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)

    def find_worker(self, worker_id: str) -> Optional[Worker]:
        return next((w for w in self.workers if w.id == worker_id), None)

    # ── derived views ─────────────────────────────────────────

    def dashboard(self, now: Optional[datetime] = None) -> DashboardSummary:
        now = now or self._clock.now_utc()
        return self._derive(
            "dashboard", (ORDERS, TRANSACTIONS),
            lambda: build_dashboard(self.orders, self.transactions, now, self._rules.tz),
            extra=(now,),
        )

    def customer_directory(self) -> List[CustomerSummary]:
        return self._derive(
            "customer_directory", (ORDERS,),
            lambda: customer_directory(self.orders),
        )

    def ledger_balance(self) -> float:
        return self._derive(
            "ledger_balance", (TRANSACTIONS,),
            lambda: ledger_balance(self.transactions),
        )

    def worker_options(self) -> Dict[str, List[str]]:
        return self._derive(
            "worker_options", (WORKERS,),
            lambda: worker_options(self.workers),
        )

    def worker_ledger(self, worker_id: str) -> Optional[WorkerLedger]:
        """None when the worker is not in the current snapshot."""
        worker = self.find_worker(worker_id)
        if worker is None:
            return None
        key = _payments_key(worker_id)
        return self._derive(
            ("worker_ledger", worker_id), (ORDERS, MASTER_ITEMS, WORKERS, key),
            lambda: worker_ledger(
                worker, self.orders, self.master_items, self.worker_payments(worker_id),
            ),
        )
