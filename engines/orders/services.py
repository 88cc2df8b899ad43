"""
Tailorbook Orders Engine — Application Service
================================================
Commit flow:
    1. Validate the draft (policies)     → OrderValidationError, no write
    2. Sanitize into the stored shape
    3a. Create → one atomic batch: order + Income row when advance > 0
    3b. Edit   → one update of the order; orderDate is never overwritten,
                 no ledger side effect
    4. Store failure → OrderCommitError; the caller's draft is untouched

Delete removes the order and its linked advance Income rows in one
atomic batch.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.auth.provider import PrincipalProvider, collection_path
from core.config.rules import ShopRules
from core.primitives.coercion import coerce_number, coerce_text
from core.store.errors import StoreError
from core.store.protocol import BatchOperation, DocumentStore
from core.time.clock import Clock
from engines.catalog.schemas import TRANSACTION_INCOME
from engines.orders.draft import OrderDraft, generate_bill_number
from engines.orders.errors import OrderCommitError, OrderValidationError
from engines.orders.policies import validate_order
from engines.orders.schemas import (
    DEFAULT_PAYMENT_METHOD,
    DISCOUNT_FIXED,
    ORDER_STATUS_ACTIVE,
    STATUS_RECEIVED,
    FeeLine,
    Item,
    Order,
    Person,
)
from projections.orders.financials import apply_financial_totals

logger = logging.getLogger("tailorbook.orders")

ORDERS = "orders"
TRANSACTIONS = "transactions"


def advance_description(bill_number: str) -> str:
    return f"Advance for Order {bill_number}"


# ══════════════════════════════════════════════════════════════
# SANITIZING
# ══════════════════════════════════════════════════════════════

def _clean_measurements(measurements: Dict[str, Any]) -> Dict[str, str]:
    cleaned = {}
    for key, value in measurements.items():
        text = coerce_text(value).strip()
        if text:
            cleaned[key] = text
    return cleaned


def _clean_item(item: Item) -> Item:
    return Item(
        id=item.id,
        name=item.name.strip(),
        price=coerce_number(item.price),
        measurements=_clean_measurements(item.measurements),
        notes=item.notes.strip(),
        design_photo=item.design_photo.strip(),
        status=item.status or STATUS_RECEIVED,
        cutter=item.cutter.strip(),
        sewer=item.sewer.strip(),
    )


def sanitize_order(order: Order) -> Order:
    """
    Stored shape of a draft: trimmed text, unnamed items dropped, people
    left without items dropped, empty measurements stripped, numbers
    coerced, fee lines without a description or with a negative amount
    dropped. Totals are recomputed on the result.
    """
    clean = copy.deepcopy(order)
    clean.customer.name = clean.customer.name.strip()
    clean.customer.number = clean.customer.number.strip()
    clean.customer.email = clean.customer.email.strip()
    clean.notes = clean.notes.strip()
    clean.status = clean.status or ORDER_STATUS_ACTIVE

    people: List[Person] = []
    for person in clean.people:
        items = [_clean_item(i) for i in person.items if i.name.strip()]
        name = person.name.strip()
        if name and items:
            people.append(Person(name=name, items=items))
    clean.people = people

    payment = clean.payment
    payment.advance = max(0, coerce_number(payment.advance))
    payment.discount_value = max(0, coerce_number(payment.discount_value))
    payment.discount_type = payment.discount_type or DISCOUNT_FIXED
    payment.method = payment.method or DEFAULT_PAYMENT_METHOD
    payment.additional_fees = [
        FeeLine(
            id=fee.id,
            description=fee.description.strip(),
            amount=coerce_number(fee.amount),
            is_manual_description=fee.is_manual_description,
        )
        for fee in payment.additional_fees
        if fee.description.strip() and coerce_number(fee.amount) >= 0
    ]
    apply_financial_totals(clean)
    return clean


# ══════════════════════════════════════════════════════════════
# SERVICE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderCommitResult:
    order_id: str
    bill_number: str
    created: bool
    advance_transaction_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "bill_number": self.bill_number,
            "created": self.created,
            "advance_transaction_id": self.advance_transaction_id,
        }


class OrderService:
    def __init__(self, *, store: DocumentStore,
                 principal_provider: PrincipalProvider,
                 rules: ShopRules,
                 clock: Clock):
        self._store = store
        self._principal_provider = principal_provider
        self._rules = rules
        self._clock = clock

    def _path(self, collection: str) -> str:
        return collection_path(self._principal_provider, self._rules, collection)

    def commit(self, draft: OrderDraft) -> OrderCommitResult:
        """Create or update from a draft. The draft itself is never modified."""
        rejection = validate_order(draft.order)
        if rejection is not None:
            logger.info(f"Order draft rejected: {rejection.code} (step {rejection.step})")
            raise OrderValidationError(rejection)

        order = sanitize_order(draft.order)
        if draft.is_new or not order.id:
            if not order.bill_number:
                order.bill_number = generate_bill_number(self._clock, self._rules.bill_prefix)
            return self._place(order)
        return self._update(order)

    def _place(self, order: Order) -> OrderCommitResult:
        orders_path = self._path(ORDERS)
        transactions_path = self._path(TRANSACTIONS)
        now = self._clock.now_utc()

        order_id = self._store.new_id(orders_path)
        order.order_date = order.order_date or now
        order.updated_at = now
        operations = [BatchOperation.set(orders_path, order_id, order.to_document())]

        transaction_id = None
        advance = coerce_number(order.payment.advance)
        if advance > 0:
            transaction_id = self._store.new_id(transactions_path)
            operations.append(BatchOperation.set(transactions_path, transaction_id, {
                "date": now,
                "type": TRANSACTION_INCOME,
                "description": advance_description(order.bill_number),
                "amount": advance,
                "orderRef": order_id,
            }))

        try:
            self._store.atomic_batch(operations)
        except StoreError as exc:
            logger.error(f"Order {order.bill_number} not placed: {exc}", exc_info=True)
            raise OrderCommitError(f"Failed to place order {order.bill_number}: {exc}") from exc

        logger.info(
            f"Order placed: {order.bill_number} (id: {order_id}, "
            f"advance row: {transaction_id or 'none'})"
        )
        return OrderCommitResult(
            order_id=order_id,
            bill_number=order.bill_number,
            created=True,
            advance_transaction_id=transaction_id,
        )

    def _update(self, order: Order) -> OrderCommitResult:
        orders_path = self._path(ORDERS)
        order.updated_at = self._clock.now_utc()
        fields = order.to_document()
        fields.pop("orderDate", None)
        if not order.bill_number:
            fields.pop("billNumber", None)

        try:
            self._store.update(orders_path, order.id, fields)
        except StoreError as exc:
            logger.error(f"Order {order.id} not updated: {exc}", exc_info=True)
            raise OrderCommitError(f"Failed to update order {order.bill_number}: {exc}") from exc

        logger.info(f"Order updated: {order.bill_number} (id: {order.id})")
        return OrderCommitResult(order_id=order.id, bill_number=order.bill_number, created=False)

    def delete(self, order_id: str) -> int:
        """
        Delete an order and its linked advance Income rows atomically.

        Returns the number of ledger rows removed.
        """
        orders_path = self._path(ORDERS)
        transactions_path = self._path(TRANSACTIONS)
        linked = self._store.query(
            transactions_path, {"orderRef": order_id, "type": TRANSACTION_INCOME},
        )
        operations = [BatchOperation.delete(orders_path, order_id)]
        operations.extend(
            BatchOperation.delete(transactions_path, row["id"]) for row in linked
        )
        try:
            self._store.atomic_batch(operations)
        except StoreError as exc:
            logger.error(f"Order {order_id} not deleted: {exc}", exc_info=True)
            raise OrderCommitError(f"Failed to delete order {order_id}: {exc}") from exc

        logger.info(f"Order {order_id} deleted with {len(linked)} linked ledger row(s).")
        return len(linked)
