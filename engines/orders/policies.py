"""
Tailorbook Orders Engine — Commit Policies
============================================
Checked in order before any write; the first rejection wins and
names the form step to return to.

    Step 1 — customer name, customer number, delivery date
    Step 2 — at least one named person with a named item;
             every person that holds items must be named
    Step 3 — nothing beyond the continuous totals
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.orders.schemas import Order

STEP_CUSTOMER = 1
STEP_PEOPLE = 2
STEP_PAYMENT = 3


def customer_details_required_policy(order: Order) -> Optional[RejectionReason]:
    if not order.customer.name.strip() or not order.customer.number.strip():
        return RejectionReason(
            code=ReasonCode.CUSTOMER_DETAILS_REQUIRED,
            message="Customer name and number are required.",
            policy_name="customer_details_required_policy",
            step=STEP_CUSTOMER)
    return None


def delivery_date_required_policy(order: Order) -> Optional[RejectionReason]:
    if order.delivery_date is None:
        return RejectionReason(
            code=ReasonCode.DELIVERY_DATE_REQUIRED,
            message="Delivery date is required.",
            policy_name="delivery_date_required_policy",
            step=STEP_CUSTOMER)
    return None


def person_with_items_required_policy(order: Order) -> Optional[RejectionReason]:
    """At least one person with a trimmed name and at least one named item."""
    for person in order.people:
        if person.name.strip() and any(item.name.strip() for item in person.items):
            return None
    return RejectionReason(
        code=ReasonCode.NO_PERSON_WITH_ITEMS,
        message="Order must have at least one person with a name and one item.",
        policy_name="person_with_items_required_policy",
        step=STEP_PEOPLE)


def person_names_required_policy(order: Order) -> Optional[RejectionReason]:
    """A person holding items is rejected outright when unnamed, never dropped."""
    for index, person in enumerate(order.people):
        if person.items and not person.name.strip():
            return RejectionReason(
                code=ReasonCode.PERSON_NAME_REQUIRED,
                message=f"Please enter a name for person {index + 1}.",
                policy_name="person_names_required_policy",
                step=STEP_PEOPLE)
    return None


ORDER_COMMIT_POLICIES = (
    customer_details_required_policy,
    delivery_date_required_policy,
    person_with_items_required_policy,
    person_names_required_policy,
)


def validate_order(order: Order) -> Optional[RejectionReason]:
    for policy in ORDER_COMMIT_POLICIES:
        rejection = policy(order)
        if rejection is not None:
            return rejection
    return None
