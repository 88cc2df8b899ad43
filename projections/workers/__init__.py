"""
Tailorbook Projections — Worker Ledger
========================================
Workers have no stored earnings. A worker's ledger is derived by
scanning every item of every order:

    item.cutter == worker.name → Cutter line, pay = master cutting_rate
    item.sewer  == worker.name → Sewer line,  pay = master sewing_rate

Rates are looked up live by item name (find_master_item). A renamed
master item or worker loses its historical attribution.

    paid    = Σ the worker's recorded payments (0 when none exist)
    pending = total_earned − paid
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from core.primitives.coercion import coerce_number, money
from engines.catalog.schemas import MasterItem, Worker, WorkerPayment, as_entities
from engines.orders.schemas import as_order

ROLE_CUTTER = "Cutter"
ROLE_SEWER = "Sewer"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def find_master_item(name: str, master_items: Iterable[Any]) -> Optional[MasterItem]:
    """The single name-based catalog lookup. Exact match; first wins."""
    if not name:
        return None
    for item in as_entities(master_items, MasterItem):
        if item.name == name:
            return item
    return None


@dataclass(frozen=True)
class WorkerLedgerLine:
    order_id: str
    order_date: Optional[datetime]
    customer: str
    item_name: str
    status: str
    role: str
    pay: float

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "customer": self.customer,
            "item_name": self.item_name,
            "status": self.status,
            "role": self.role,
            "pay": self.pay,
        }


@dataclass
class WorkerLedger:
    worker_name: str
    lines: List[WorkerLedgerLine] = field(default_factory=list)
    total_earned: float = 0
    paid: float = 0
    pending: float = 0

    def to_dict(self) -> dict:
        return {
            "worker_name": self.worker_name,
            "lines": [line.to_dict() for line in self.lines],
            "total_earned": self.total_earned,
            "paid": self.paid,
            "pending": self.pending,
        }


def _instant(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return _EPOCH
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def worker_ledger(
    worker: Any,
    orders: Iterable[Any],
    master_items: Iterable[Any],
    payments: Iterable[Any] = (),
) -> WorkerLedger:
    worker = worker if isinstance(worker, Worker) else Worker.from_document(worker)
    masters = as_entities(master_items, MasterItem)
    lines: List[WorkerLedgerLine] = []

    if worker.name:
        for raw in orders or ():
            order = as_order(raw)
            for _, _, _, item in order.iter_items():
                master = find_master_item(item.name, masters)
                for role, assigned, rate in (
                    (ROLE_CUTTER, item.cutter, master.cutting_rate if master else 0),
                    (ROLE_SEWER, item.sewer, master.sewing_rate if master else 0),
                ):
                    if assigned != worker.name:
                        continue
                    lines.append(WorkerLedgerLine(
                        order_id=order.bill_number or order.id or "",
                        order_date=order.order_date,
                        customer=order.customer.name,
                        item_name=item.name,
                        status=item.status,
                        role=role,
                        pay=coerce_number(rate),
                    ))

    lines.sort(key=lambda line: _instant(line.order_date), reverse=True)

    paid = 0
    for payment in as_entities(payments, WorkerPayment):
        if worker.id and payment.worker_id and payment.worker_id != worker.id:
            continue
        paid += coerce_number(payment.amount)

    total_earned = sum(line.pay for line in lines)
    return WorkerLedger(
        worker_name=worker.name,
        lines=lines,
        total_earned=money(total_earned),
        paid=money(paid),
        pending=money(total_earned - paid),
    )


def worker_options(workers: Iterable[Any]) -> Dict[str, List[str]]:
    """Assignment choices: cutters and sewers by (case-insensitive) category."""
    options: Dict[str, List[str]] = {"cutters": [], "sewers": []}
    for worker in as_entities(workers, Worker):
        category = worker.category.strip().lower()
        if category == "cutter":
            options["cutters"].append(worker.name)
        elif category == "sewer":
            options["sewers"].append(worker.name)
    return options
