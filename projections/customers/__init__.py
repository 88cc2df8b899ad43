"""
Tailorbook Projections — Customer Directory
=============================================
Customers are never stored. They are a grouping of orders by a
derived identity key:

    key = lower(trim(name)) + "-" + number with whitespace, dashes,
          dots and parentheses removed

The key is a heuristic. Two different people sharing name and phone
collide; a name or number edited between orders forks the customer
into two entries. customer_key() is the one place the rule lives.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from core.primitives.coercion import coerce_mapping, coerce_number, coerce_text, money
from engines.orders.schemas import CustomerInfo, Order, as_order

_NUMBER_NOISE = re.compile(r"[\s\-.()]+")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def customer_key(customer: Any) -> Optional[str]:
    """Derived identity for a customer record; None when name and number are both blank."""
    if isinstance(customer, CustomerInfo):
        name, number = customer.name, customer.number
    else:
        doc = coerce_mapping(customer)
        name, number = coerce_text(doc.get("name")), coerce_text(doc.get("number"))
    name = name.strip().lower()
    number = _NUMBER_NOISE.sub("", number.strip())
    if not name and not number:
        return None
    return f"{name}-{number}"


def _instant(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return _EPOCH
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class OrderHistoryEntry:
    id: Optional[str]
    bill_number: str
    order_date: Optional[datetime]
    total: float
    pending: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bill_number": self.bill_number,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "total": self.total,
            "pending": self.pending,
        }


@dataclass
class CustomerSummary:
    key: str
    customer_info: CustomerInfo
    total_orders: int = 0
    total_spent: float = 0
    last_order_date: Optional[datetime] = None
    order_history: List[OrderHistoryEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "customer_info": self.customer_info.to_document(),
            "total_orders": self.total_orders,
            "total_spent": self.total_spent,
            "last_order_date": (
                self.last_order_date.isoformat() if self.last_order_date else None
            ),
            "order_history": [entry.to_dict() for entry in self.order_history],
        }


def customer_directory(orders: Iterable[Any]) -> List[CustomerSummary]:
    """
    One summary per derived customer key, sorted by customer name.

    customer_info comes from the most recent order; order_history is
    newest first, ties kept in encounter order.
    """
    groups: dict[str, List[Order]] = {}
    for raw in orders or ():
        order = as_order(raw)
        key = customer_key(order.customer)
        if key is None:
            continue
        groups.setdefault(key, []).append(order)

    directory = []
    for key, members in groups.items():
        history = sorted(members, key=lambda o: _instant(o.order_date), reverse=True)
        dated = [o.order_date for o in members if o.order_date is not None]
        directory.append(CustomerSummary(
            key=key,
            customer_info=CustomerInfo(**vars(history[0].customer)),
            total_orders=len(members),
            total_spent=money(sum(coerce_number(o.payment.total) for o in members)),
            last_order_date=max(dated, key=_instant) if dated else None,
            order_history=[
                OrderHistoryEntry(
                    id=o.id,
                    bill_number=o.bill_number,
                    order_date=o.order_date,
                    total=coerce_number(o.payment.total),
                    pending=coerce_number(o.payment.pending),
                )
                for o in history
            ],
        ))

    directory.sort(key=lambda s: s.customer_info.name.strip().casefold())
    return directory


def search_customers(directory: Iterable[CustomerSummary], term: str) -> List[CustomerSummary]:
    """Match on name or email (case-insensitive) or on the whitespace-free number."""
    directory = list(directory)
    lowered = (term or "").strip().lower()
    if not lowered:
        return directory
    compact = re.sub(r"\s+", "", lowered)
    return [
        s for s in directory
        if lowered in s.customer_info.name.lower()
        or compact in re.sub(r"\s+", "", s.customer_info.number)
        or lowered in s.customer_info.email.lower()
    ]
