"""
Tailorbook Projections — Order Financial Totals
=================================================
    subtotal        = Σ item.price over every item of every person
    fees_total      = Σ additional_fees[].amount
    discount_amount = percent → round_half_up(subtotal × value / 100)
                      fixed   → value
                      other   → 0
                      clamped to [0, subtotal + fees_total]
    total           = subtotal + fees_total − discount_amount
    pending         = total − advance   (negative means overpaid; not clamped)

apply_financial_totals() writes the derived values back into the
payment only when they differ from what is stored, so repeated calls
settle instead of looping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.primitives.coercion import coerce_number, money, round_half_up
from engines.orders.schemas import (
    DISCOUNT_FIXED,
    DISCOUNT_PERCENT,
    Order,
    as_order,
)


@dataclass(frozen=True)
class FinancialTotals:
    subtotal: float
    fees_total: float
    discount_amount: float
    total: float
    pending: float

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "fees_total": self.fees_total,
            "discount_amount": self.discount_amount,
            "total": self.total,
            "pending": self.pending,
        }


def _as_order(value: Any) -> Order:
    # Drafts expose the order they wrap.
    inner = getattr(value, "order", None)
    if isinstance(inner, Order):
        return inner
    return as_order(value)


def compute_financial_totals(order: Any) -> FinancialTotals:
    """Accepts an Order, an OrderDraft or a raw stored document."""
    order = _as_order(order)
    payment = order.payment

    subtotal = sum(coerce_number(item.price) for _, _, _, item in order.iter_items())
    fees_total = sum(coerce_number(fee.amount) for fee in payment.additional_fees)

    value = coerce_number(payment.discount_value)
    discount = 0
    if value > 0:
        if payment.discount_type == DISCOUNT_PERCENT:
            discount = round_half_up(subtotal * value / 100)
        elif payment.discount_type == DISCOUNT_FIXED:
            discount = value
    discount = min(discount, max(0, subtotal + fees_total))

    total = subtotal + fees_total - discount
    pending = total - coerce_number(payment.advance)
    return FinancialTotals(
        subtotal=money(subtotal),
        fees_total=money(fees_total),
        discount_amount=money(discount),
        total=money(total),
        pending=money(pending),
    )


def apply_financial_totals(order: Any) -> bool:
    """
    Recompute and store totals on order.payment.

    Returns True when anything changed.
    """
    order = _as_order(order)
    totals = compute_financial_totals(order)
    payment = order.payment
    changed = False
    for attr, value in (
        ("subtotal", totals.subtotal),
        ("calculated_discount", totals.discount_amount),
        ("total", totals.total),
        ("pending", totals.pending),
    ):
        if getattr(payment, attr) != value:
            setattr(payment, attr, value)
            changed = True
    return changed
