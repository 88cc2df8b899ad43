"""
Tailorbook Catalog Engine — Entry Policies
============================================
Each policy inspects an already-coerced entity and returns a
RejectionReason, or None when the entry may be written.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.catalog.schemas import (
    FeeDefinition,
    MasterItem,
    Transaction,
    Worker,
    WorkerPayment,
)


def master_item_name_required_policy(item: MasterItem) -> Optional[RejectionReason]:
    if not item.name.strip():
        return RejectionReason(
            code=ReasonCode.NAME_REQUIRED,
            message="Item Name is required.",
            policy_name="master_item_name_required_policy")
    return None


def fee_description_required_policy(fee: FeeDefinition) -> Optional[RejectionReason]:
    if not fee.description.strip():
        return RejectionReason(
            code=ReasonCode.DESCRIPTION_REQUIRED,
            message="Fee Description is required.",
            policy_name="fee_description_required_policy")
    return None


def worker_details_required_policy(worker: Worker) -> Optional[RejectionReason]:
    if not worker.name.strip():
        return RejectionReason(
            code=ReasonCode.NAME_REQUIRED,
            message="Worker Name and Category are required.",
            policy_name="worker_details_required_policy")
    if not worker.category.strip():
        return RejectionReason(
            code=ReasonCode.CATEGORY_REQUIRED,
            message="Worker Name and Category are required.",
            policy_name="worker_details_required_policy")
    return None


def worker_payment_positive_policy(payment: WorkerPayment) -> Optional[RejectionReason]:
    if payment.amount <= 0:
        return RejectionReason(
            code=ReasonCode.AMOUNT_MUST_BE_POSITIVE,
            message="Please enter a valid positive payment amount.",
            policy_name="worker_payment_positive_policy")
    return None


def expense_entry_policy(entry: Transaction) -> Optional[RejectionReason]:
    if not entry.description.strip():
        return RejectionReason(
            code=ReasonCode.DESCRIPTION_REQUIRED,
            message="Please enter a valid description and positive amount.",
            policy_name="expense_entry_policy")
    if entry.amount <= 0:
        return RejectionReason(
            code=ReasonCode.AMOUNT_MUST_BE_POSITIVE,
            message="Please enter a valid description and positive amount.",
            policy_name="expense_entry_policy")
    return None
