"""
Tailorbook Projections — Revenue Windows and Status Distribution
==================================================================
Windows are anchored in shop-local time:

    today → local midnight of ``now``
    month → first day of ``now``'s month, 00:00
    year  → 1 January of ``now``'s year, 00:00

An order counts toward a window when its orderDate ≥ the window start.
Orders with a missing or unreadable orderDate are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, Optional

from core.primitives.coercion import coerce_number, money
from core.time.temporal import to_local
from engines.orders.schemas import ITEM_STATUSES, as_order


@dataclass(frozen=True)
class RevenueWindow:
    revenue: float = 0
    order_count: int = 0

    def to_dict(self) -> dict:
        return {"revenue": self.revenue, "order_count": self.order_count}


@dataclass(frozen=True)
class RevenueRollup:
    today: RevenueWindow
    month: RevenueWindow
    year: RevenueWindow

    def to_dict(self) -> dict:
        return {
            "today": self.today.to_dict(),
            "month": self.month.to_dict(),
            "year": self.year.to_dict(),
        }


def window_starts(now: datetime, tz: Optional[tzinfo] = None) -> Dict[str, datetime]:
    tz = tz or now.tzinfo or timezone.utc
    local_now = to_local(now, tz)
    today = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return {
        "today": today,
        "month": today.replace(day=1),
        "year": today.replace(month=1, day=1),
    }


def revenue_rollup(
    orders: Iterable[Any], now: datetime, tz: Optional[tzinfo] = None,
) -> RevenueRollup:
    tz = tz or now.tzinfo or timezone.utc
    starts = window_starts(now, tz)
    revenue = {name: 0 for name in starts}
    counts = {name: 0 for name in starts}

    for raw in orders or ():
        order = as_order(raw)
        if order.order_date is None:
            continue
        placed = to_local(order.order_date, tz)
        total = coerce_number(order.payment.total)
        for name, start in starts.items():
            if placed >= start:
                revenue[name] += total
                counts[name] += 1

    return RevenueRollup(**{
        name: RevenueWindow(revenue=money(revenue[name]), order_count=counts[name])
        for name in starts
    })


def item_status_distribution(orders: Iterable[Any]) -> Dict[str, int]:
    """Count items per workflow status; unknown statuses are ignored."""
    counts = {status: 0 for status in ITEM_STATUSES}
    for raw in orders or ():
        for _, _, _, item in as_order(raw).iter_items():
            if item.status in counts:
                counts[item.status] += 1
    return counts
