"""
Tailorbook Projections — Order List Filtering
===============================================
Criteria combine with AND:

    search          → customer name / bill number (case-insensitive),
                      or a substring of the customer number
    status          → at least one item in that status
    pending_only    → payment.pending > 0
    start/end date  → inclusive local-day range on orderDate

The order list shows dated orders only: an order whose orderDate is
missing or unreadable never matches. Results are newest first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Iterable, List, Optional

from core.primitives.coercion import coerce_number
from core.time.temporal import day_window, to_local
from engines.orders.schemas import Order, as_order

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class OrderFilter:
    search: str = ""
    status: str = ""
    pending_only: bool = False
    start_date: Any = None
    end_date: Any = None


def _matches_search(order: Order, term: str) -> bool:
    if not term:
        return True
    lowered = term.lower()
    return (
        lowered in order.customer.name.lower()
        or term in order.customer.number
        or lowered in order.bill_number.lower()
    )


def newest_first(orders: Iterable[Order], tz: tzinfo) -> List[Order]:
    """Sort by orderDate descending; undated orders last, encounter order kept."""
    def key(order: Order) -> datetime:
        if order.order_date is None:
            return _EPOCH
        return to_local(order.order_date, tz)
    return sorted(orders, key=key, reverse=True)


def filter_orders(
    orders: Iterable[Any], criteria: OrderFilter, tz: Optional[tzinfo] = None,
) -> List[Order]:
    tz = tz or timezone.utc
    start, end = day_window(criteria.start_date, criteria.end_date, tz)
    term = (criteria.search or "").strip()

    matched = []
    for raw in orders or ():
        order = as_order(raw)
        if order.order_date is None:
            continue
        placed = to_local(order.order_date, tz)
        if start is not None and placed < start:
            continue
        if end is not None and placed > end:
            continue
        if not _matches_search(order, term):
            continue
        if criteria.pending_only and coerce_number(order.payment.pending) <= 0:
            continue
        if criteria.status and not any(
            item.status == criteria.status for _, _, _, item in order.iter_items()
        ):
            continue
        matched.append(order)
    return newest_first(matched, tz)
