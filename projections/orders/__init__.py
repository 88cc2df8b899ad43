"""
Tailorbook Projections — Order Read Models
============================================
Pure derivations over the loaded orders collection. No store access,
never raises on malformed documents.
"""

from projections.orders.filters import OrderFilter, filter_orders, newest_first
from projections.orders.financials import (
    FinancialTotals,
    apply_financial_totals,
    compute_financial_totals,
)
from projections.orders.revenue import (
    RevenueRollup,
    RevenueWindow,
    item_status_distribution,
    revenue_rollup,
    window_starts,
)

__all__ = [
    "FinancialTotals",
    "OrderFilter",
    "RevenueRollup",
    "RevenueWindow",
    "apply_financial_totals",
    "compute_financial_totals",
    "filter_orders",
    "item_status_distribution",
    "newest_first",
    "revenue_rollup",
    "window_starts",
]
