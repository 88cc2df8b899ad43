"""
Tailorbook Projections — Dashboard
====================================
KPIs over the loaded orders and transactions, anchored at ``now`` in
shop-local time:

- total pending across orders
- items in progress (Cutting + Sewing) and ready for trial
- revenue windows and status distribution
- overdue deliveries: delivery before today's midnight
- upcoming deliveries: delivery from today through now + 7 days
- this month's income and expense
- the five most recent orders

Orders whose items are all Delivered are neither overdue nor upcoming.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional

from core.primitives.coercion import coerce_number, money
from core.time.temporal import to_local
from engines.orders.schemas import (
    STATUS_CUTTING,
    STATUS_DELIVERED,
    STATUS_READY_FOR_TRIAL,
    STATUS_SEWING,
    Order,
    as_order,
)
from projections.ledger import cashflow_since
from projections.orders.filters import newest_first
from projections.orders.revenue import (
    RevenueRollup,
    item_status_distribution,
    revenue_rollup,
    window_starts,
)

RECENT_ORDER_LIMIT = 5
DELIVERY_LIST_LIMIT = 5
UPCOMING_DAYS = 7


@dataclass
class DashboardSummary:
    total_pending: float = 0
    items_in_progress: int = 0
    ready_for_trial: int = 0
    overdue_count: int = 0
    month_income: float = 0
    month_expense: float = 0
    revenue: Optional[RevenueRollup] = None
    status_counts: Dict[str, int] = field(default_factory=dict)
    overdue_orders: List[Order] = field(default_factory=list)
    upcoming_orders: List[Order] = field(default_factory=list)
    recent_orders: List[Order] = field(default_factory=list)

    def to_dict(self) -> dict:
        def brief(order: Order) -> dict:
            return {
                "id": order.id,
                "bill_number": order.bill_number,
                "customer": order.customer.name,
                "order_date": order.order_date.isoformat() if order.order_date else None,
                "delivery_date": (
                    order.delivery_date.isoformat() if order.delivery_date else None
                ),
                "total": order.payment.total,
                "pending": order.payment.pending,
            }

        return {
            "total_pending": self.total_pending,
            "items_in_progress": self.items_in_progress,
            "ready_for_trial": self.ready_for_trial,
            "overdue_count": self.overdue_count,
            "month_income": self.month_income,
            "month_expense": self.month_expense,
            "month_net": money(self.month_income - self.month_expense),
            "revenue": self.revenue.to_dict() if self.revenue else None,
            "status_counts": dict(self.status_counts),
            "overdue_orders": [brief(o) for o in self.overdue_orders],
            "upcoming_orders": [brief(o) for o in self.upcoming_orders],
            "recent_orders": [brief(o) for o in self.recent_orders],
        }


def is_fully_delivered(order: Order) -> bool:
    return all(
        item.status == STATUS_DELIVERED for _, _, _, item in order.iter_items()
    )


def build_dashboard(
    orders: Iterable[Any],
    transactions: Iterable[Any],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> DashboardSummary:
    tz = tz or now.tzinfo or timezone.utc
    parsed = [as_order(raw) for raw in orders or ()]
    starts = window_starts(now, tz)
    horizon = to_local(now, tz) + timedelta(days=UPCOMING_DAYS)

    summary = DashboardSummary()
    overdue, upcoming = [], []
    total_pending = 0
    for order in parsed:
        total_pending += coerce_number(order.payment.pending)
        for _, _, _, item in order.iter_items():
            if item.status in (STATUS_CUTTING, STATUS_SEWING):
                summary.items_in_progress += 1
            elif item.status == STATUS_READY_FOR_TRIAL:
                summary.ready_for_trial += 1
        if order.delivery_date is None or is_fully_delivered(order):
            continue
        due = to_local(order.delivery_date, tz)
        if due < starts["today"]:
            overdue.append((due, order))
        elif due <= horizon:
            upcoming.append((due, order))

    overdue.sort(key=lambda pair: pair[0])
    upcoming.sort(key=lambda pair: pair[0])

    flow = cashflow_since(transactions, starts["month"], tz)
    summary.total_pending = money(total_pending)
    summary.overdue_count = len(overdue)
    summary.overdue_orders = [o for _, o in overdue[:DELIVERY_LIST_LIMIT]]
    summary.upcoming_orders = [o for _, o in upcoming[:DELIVERY_LIST_LIMIT]]
    summary.month_income = flow["income"]
    summary.month_expense = flow["expense"]
    summary.revenue = revenue_rollup(parsed, now, tz)
    summary.status_counts = item_status_distribution(parsed)
    summary.recent_orders = newest_first(parsed, tz)[:RECENT_ORDER_LIMIT]
    return summary
