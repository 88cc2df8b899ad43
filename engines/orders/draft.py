"""
Tailorbook Orders Engine — Draft Editing
==========================================
A draft is an in-memory Order being edited, plus two flags:

    person_name_overridden → person[0] no longer follows customer.name
    is_new                 → commit creates instead of updating

Every operation returns a NEW draft; the input is never mutated.
Every operation re-runs the financial totals, so the total/pending
invariants hold after any edit.

Floors: a draft always has ≥ 1 person and every person ≥ 1 item.
Removing the last one is a silent no-op.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Any, Iterable, Optional

from core.config.rules import ShopRules
from core.primitives.coercion import coerce_number, coerce_text, non_negative
from core.time.clock import Clock, epoch_millis, now_local
from core.time.temporal import parse_date_input
from engines.catalog.schemas import FeeDefinition, MasterItem, as_entities
from engines.orders.errors import InvalidItemPath
from engines.orders.schemas import (
    MEASUREMENT_FIELDS,
    FeeLine,
    Item,
    Order,
    Payment,
    Person,
)
from projections.orders.financials import apply_financial_totals
from projections.workers import find_master_item

MANUAL_FEE = "_manual_"

ITEM_TEXT_FIELDS = {
    "notes": "notes",
    "designPhoto": "design_photo",
    "design_photo": "design_photo",
    "status": "status",
    "cutter": "cutter",
    "sewer": "sewer",
}
CUSTOMER_FIELDS = ("name", "number", "email")
ORDER_FIELDS = ("deliveryDate", "delivery_date", "notes", "status")
PAYMENT_FIELDS = {
    "advance": "advance",
    "discountValue": "discount_value",
    "discount_value": "discount_value",
    "discountType": "discount_type",
    "discount_type": "discount_type",
    "method": "method",
}


@dataclass
class OrderDraft:
    order: Order
    person_name_overridden: bool = False
    is_new: bool = True

    def copy(self) -> "OrderDraft":
        return copy.deepcopy(self)


# ══════════════════════════════════════════════════════════════
# SEEDING
# ══════════════════════════════════════════════════════════════

def generate_bill_number(clock: Clock, prefix: str = "TH") -> str:
    """Timestamp-derived, display-unique only (collisions are possible)."""
    return f"{prefix}-{epoch_millis(clock.now_utc())}"


def new_person() -> Person:
    return Person(name="", items=[Item()])


def new_draft(clock: Clock, rules: Optional[ShopRules] = None) -> OrderDraft:
    rules = rules or ShopRules()
    today = now_local(clock, rules.tz).replace(hour=0, minute=0, second=0, microsecond=0)
    order = Order(
        bill_number=generate_bill_number(clock, rules.bill_prefix),
        order_date=clock.now_utc(),
        delivery_date=today,
        people=[new_person()],
        payment=Payment(method=rules.default_payment_method),
    )
    return OrderDraft(order=order)


def _reshape_measurements(item: Item, master: Optional[MasterItem]) -> None:
    fields = master.measurement_fields if master is not None else []
    if fields:
        item.measurements = {f: item.measurements.get(f, "") for f in fields}


def load_draft(
    document: Any,
    master_items: Iterable[Any] = (),
    doc_id: Optional[str] = None,
) -> OrderDraft:
    """
    Merge a stored order onto the template so every field exists.

    Items gain empty slots for their master item's required
    measurements; values already recorded are kept.
    """
    order = Order.from_document(document)
    if doc_id:
        order.id = doc_id
    masters = as_entities(master_items, MasterItem)

    if not order.people:
        order.people = [new_person()]
    for person in order.people:
        if not person.items:
            person.items = [Item()]
        for item in person.items:
            master = find_master_item(item.name, masters)
            if master is not None:
                item.measurements = {
                    **{f: "" for f in master.measurement_fields},
                    **item.measurements,
                }

    first = order.people[0].name
    overridden = bool(first) and first != order.customer.name
    apply_financial_totals(order)
    return OrderDraft(order=order, person_name_overridden=overridden, is_new=False)


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

def _edited(draft: OrderDraft) -> OrderDraft:
    return draft.copy()


def _settled(draft: OrderDraft) -> OrderDraft:
    apply_financial_totals(draft.order)
    return draft


def _person(order: Order, person_index: int) -> Person:
    if not 0 <= person_index < len(order.people):
        raise InvalidItemPath(person_index)
    return order.people[person_index]


def _item(order: Order, person_index: int, item_index: int) -> Item:
    person = _person(order, person_index)
    if not 0 <= item_index < len(person.items):
        raise InvalidItemPath(person_index, item_index)
    return person.items[item_index]


def _follow_customer_name(draft: OrderDraft) -> None:
    if not draft.person_name_overridden and draft.order.people:
        draft.order.people[0].name = draft.order.customer.name


# ══════════════════════════════════════════════════════════════
# PEOPLE AND ITEMS
# ══════════════════════════════════════════════════════════════

def add_person(draft: OrderDraft) -> OrderDraft:
    result = _edited(draft)
    result.order.people.append(new_person())
    return _settled(result)


def remove_person(draft: OrderDraft, person_index: int) -> OrderDraft:
    result = _edited(draft)
    people = result.order.people
    if len(people) > 1 and 0 <= person_index < len(people):
        del people[person_index]
        if person_index == 0:
            first = people[0].name
            result.person_name_overridden = first != "" and first != result.order.customer.name
    return _settled(result)


def set_person_name(draft: OrderDraft, person_index: int, name: Any) -> OrderDraft:
    result = _edited(draft)
    person = _person(result.order, person_index)
    person.name = coerce_text(name)
    if person_index == 0:
        result.person_name_overridden = (
            person.name != "" and person.name != result.order.customer.name
        )
        _follow_customer_name(result)
    return _settled(result)


def add_item(draft: OrderDraft, person_index: int) -> OrderDraft:
    result = _edited(draft)
    _person(result.order, person_index).items.append(Item())
    return _settled(result)


def remove_item(draft: OrderDraft, person_index: int, item_index: int) -> OrderDraft:
    result = _edited(draft)
    items = _person(result.order, person_index).items
    if len(items) > 1 and 0 <= item_index < len(items):
        del items[item_index]
    return _settled(result)


def set_item_field(
    draft: OrderDraft,
    person_index: int,
    item_index: int,
    field_name: str,
    value: Any,
    master_items: Iterable[Any] = (),
) -> OrderDraft:
    """
    Route one edit into an item.

    Measurement names go into item.measurements. Setting ``name`` to a
    master item's name copies its customer price (once, no live link)
    and reshapes measurements to its required fields. ``price`` is
    coerced to a number, 0 when unreadable.
    """
    result = _edited(draft)
    item = _item(result.order, person_index, item_index)

    if field_name in MEASUREMENT_FIELDS or field_name in item.measurements:
        item.measurements[field_name] = coerce_text(value)
    elif field_name == "name":
        item.name = coerce_text(value)
        master = find_master_item(item.name, master_items)
        if master is not None:
            item.price = master.customer_price
            _reshape_measurements(item, master)
    elif field_name == "price":
        item.price = coerce_number(value)
    elif field_name in ITEM_TEXT_FIELDS:
        setattr(item, ITEM_TEXT_FIELDS[field_name], coerce_text(value))
    else:
        raise ValueError(f"Unknown item field: {field_name}")
    return _settled(result)


# ══════════════════════════════════════════════════════════════
# CUSTOMER, ORDER AND PAYMENT FIELDS
# ══════════════════════════════════════════════════════════════

def set_customer_field(draft: OrderDraft, field_name: str, value: Any) -> OrderDraft:
    if field_name not in CUSTOMER_FIELDS:
        raise ValueError(f"Unknown customer field: {field_name}")
    result = _edited(draft)
    text = coerce_text(value)
    setattr(result.order.customer, field_name, text)
    if field_name == "name":
        first = result.order.people[0].name if result.order.people else None
        if text == "" or text == first:
            result.person_name_overridden = False
        _follow_customer_name(result)
    return _settled(result)


def set_order_field(
    draft: OrderDraft, field_name: str, value: Any, tz: Optional[tzinfo] = None,
) -> OrderDraft:
    if field_name not in ORDER_FIELDS:
        raise ValueError(f"Unknown order field: {field_name}")
    result = _edited(draft)
    order = result.order
    if field_name in ("deliveryDate", "delivery_date"):
        order.delivery_date = parse_date_input(value, tz or timezone.utc)
    elif field_name == "notes":
        order.notes = coerce_text(value)
    else:
        order.status = coerce_text(value)
    return _settled(result)


def set_payment_field(draft: OrderDraft, field_name: str, value: Any) -> OrderDraft:
    """advance and discount value are coerced and clamped at ≥ 0."""
    if field_name not in PAYMENT_FIELDS:
        raise ValueError(f"Unknown payment field: {field_name}")
    result = _edited(draft)
    attr = PAYMENT_FIELDS[field_name]
    if attr in ("advance", "discount_value"):
        setattr(result.order.payment, attr, non_negative(value))
    else:
        setattr(result.order.payment, attr, coerce_text(value))
    return _settled(result)


# ══════════════════════════════════════════════════════════════
# FEES
# ══════════════════════════════════════════════════════════════

def add_fee(draft: OrderDraft) -> OrderDraft:
    result = _edited(draft)
    result.order.payment.additional_fees.append(FeeLine())
    return _settled(result)


def remove_fee(draft: OrderDraft, fee_id: str) -> OrderDraft:
    result = _edited(draft)
    payment = result.order.payment
    payment.additional_fees = [f for f in payment.additional_fees if f.id != fee_id]
    return _settled(result)


def set_fee_field(
    draft: OrderDraft,
    fee_id: str,
    field_name: str,
    value: Any,
    fee_definitions: Iterable[Any] = (),
) -> OrderDraft:
    """
    Fields:
        select      → a catalog description copies its default amount;
                      MANUAL_FEE switches to a typed description
        description → typed description (manual lines only)
        amount      → numeric, 0 when unreadable
    """
    result = _edited(draft)
    fee = next((f for f in result.order.payment.additional_fees if f.id == fee_id), None)
    if fee is None:
        return result

    if field_name == "select":
        choice = coerce_text(value)
        definition = next(
            (d for d in as_entities(fee_definitions, FeeDefinition) if d.description == choice),
            None,
        )
        if choice == MANUAL_FEE:
            fee.description = ""
            fee.is_manual_description = True
        elif definition is not None:
            fee.description = definition.description
            fee.amount = definition.default_amount
            fee.is_manual_description = False
        else:
            fee.description = ""
            fee.amount = 0
            fee.is_manual_description = True
    elif field_name == "description":
        if fee.is_manual_description:
            fee.description = coerce_text(value)
    elif field_name == "amount":
        fee.amount = coerce_number(value)
    else:
        raise ValueError(f"Unknown fee field: {field_name}")
    return _settled(result)
