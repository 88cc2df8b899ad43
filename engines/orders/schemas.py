"""
Tailorbook Orders Engine — Entity Schemas
===========================================
Engine: Orders (tailoring order lifecycle)

An Order is the root aggregate:

    Order
      ├── customer: CustomerInfo        (embedded, not a reference)
      ├── people: [Person]              (length ≥ 1)
      │     └── items: [Item]           (length ≥ 1 per person while drafting)
      │           ├── measurements      (sparse: field → text)
      │           └── status / cutter / sewer
      └── payment: Payment
            └── additional_fees: [FeeLine]

from_document() is tolerant: stored documents may be partial, predate a
field, or carry wrong types. Missing or malformed values default to
empty/zero and never raise. to_document() produces the stored shape
(camelCase keys). The document id travels outside the body.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.primitives.coercion import (
    coerce_list,
    coerce_mapping,
    coerce_number,
    coerce_text,
)
from core.time.temporal import parse_timestamp


# ══════════════════════════════════════════════════════════════
# VOCABULARY
# ══════════════════════════════════════════════════════════════

STATUS_RECEIVED = "Received"
STATUS_CUTTING = "Cutting"
STATUS_SEWING = "Sewing"
STATUS_READY_FOR_TRIAL = "Ready for Trial"
STATUS_DELIVERED = "Delivered"

ITEM_STATUSES = (
    STATUS_RECEIVED,
    STATUS_CUTTING,
    STATUS_SEWING,
    STATUS_READY_FOR_TRIAL,
    STATUS_DELIVERED,
)

MEASUREMENT_FIELDS = (
    "Length", "Chest", "Waist", "Sleeve", "Shoulder", "Hips", "Neck", "Other",
)

DISCOUNT_FIXED = "fixed"
DISCOUNT_PERCENT = "percent"

ORDER_STATUS_ACTIVE = "Active"
DEFAULT_PAYMENT_METHOD = "Cash"


def new_item_id() -> str:
    return str(uuid.uuid4())


def _timestamp(value: Any) -> Optional[datetime]:
    return parse_timestamp(value)


# ══════════════════════════════════════════════════════════════
# EMBEDDED RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass
class CustomerInfo:
    name: str = ""
    number: str = ""
    email: str = ""

    @classmethod
    def from_document(cls, doc: Any) -> "CustomerInfo":
        doc = coerce_mapping(doc)
        return cls(
            name=coerce_text(doc.get("name")),
            number=coerce_text(doc.get("number")),
            email=coerce_text(doc.get("email")),
        )

    def to_document(self) -> dict:
        return {"name": self.name, "number": self.number, "email": self.email}


@dataclass
class Item:
    id: str = field(default_factory=new_item_id)
    name: str = ""
    price: float = 0
    measurements: Dict[str, str] = field(default_factory=dict)
    notes: str = ""
    design_photo: str = ""
    status: str = STATUS_RECEIVED
    cutter: str = ""
    sewer: str = ""

    @classmethod
    def from_document(cls, doc: Any) -> "Item":
        doc = coerce_mapping(doc)
        measurements = {
            str(key): coerce_text(value)
            for key, value in coerce_mapping(doc.get("measurements")).items()
        }
        return cls(
            id=coerce_text(doc.get("id")) or new_item_id(),
            name=coerce_text(doc.get("name")),
            price=coerce_number(doc.get("price")),
            measurements=measurements,
            notes=coerce_text(doc.get("notes")),
            design_photo=coerce_text(doc.get("designPhoto")),
            status=coerce_text(doc.get("status")) or STATUS_RECEIVED,
            cutter=coerce_text(doc.get("cutter")),
            sewer=coerce_text(doc.get("sewer")),
        )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "measurements": dict(self.measurements),
            "notes": self.notes,
            "designPhoto": self.design_photo,
            "status": self.status,
            "cutter": self.cutter,
            "sewer": self.sewer,
        }


@dataclass
class Person:
    name: str = ""
    items: List[Item] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Any) -> "Person":
        doc = coerce_mapping(doc)
        return cls(
            name=coerce_text(doc.get("name")),
            items=[Item.from_document(i) for i in coerce_list(doc.get("items"))],
        )

    def to_document(self) -> dict:
        return {"name": self.name, "items": [i.to_document() for i in self.items]}


@dataclass
class FeeLine:
    """A fee attached to one order. The amount is copied, never linked."""

    id: str = field(default_factory=new_item_id)
    description: str = ""
    amount: float = 0
    is_manual_description: bool = True

    @classmethod
    def from_document(cls, doc: Any) -> "FeeLine":
        doc = coerce_mapping(doc)
        manual = doc.get("isManualDescription")
        return cls(
            id=coerce_text(doc.get("id")) or new_item_id(),
            description=coerce_text(doc.get("description")),
            amount=coerce_number(doc.get("amount")),
            is_manual_description=manual if isinstance(manual, bool) else True,
        )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "isManualDescription": self.is_manual_description,
        }


@dataclass
class Payment:
    total: float = 0
    advance: float = 0
    pending: float = 0
    method: str = DEFAULT_PAYMENT_METHOD
    subtotal: float = 0
    discount_type: str = DISCOUNT_FIXED
    discount_value: float = 0
    calculated_discount: float = 0
    additional_fees: List[FeeLine] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Any) -> "Payment":
        doc = coerce_mapping(doc)
        return cls(
            total=coerce_number(doc.get("total")),
            advance=coerce_number(doc.get("advance")),
            pending=coerce_number(doc.get("pending")),
            method=coerce_text(doc.get("method")) or DEFAULT_PAYMENT_METHOD,
            subtotal=coerce_number(doc.get("subtotal")),
            discount_type=coerce_text(doc.get("discountType")) or DISCOUNT_FIXED,
            discount_value=coerce_number(doc.get("discountValue")),
            calculated_discount=coerce_number(doc.get("calculatedDiscount")),
            additional_fees=[
                FeeLine.from_document(f) for f in coerce_list(doc.get("additionalFees"))
            ],
        )

    def to_document(self) -> dict:
        return {
            "total": self.total,
            "advance": self.advance,
            "pending": self.pending,
            "method": self.method,
            "subtotal": self.subtotal,
            "discountType": self.discount_type,
            "discountValue": self.discount_value,
            "calculatedDiscount": self.calculated_discount,
            "additionalFees": [f.to_document() for f in self.additional_fees],
        }


# ══════════════════════════════════════════════════════════════
# ORDER (root aggregate)
# ══════════════════════════════════════════════════════════════

@dataclass
class Order:
    id: Optional[str] = None
    bill_number: str = ""
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    order_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    notes: str = ""
    people: List[Person] = field(default_factory=list)
    payment: Payment = field(default_factory=Payment)
    status: str = ORDER_STATUS_ACTIVE
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Any) -> "Order":
        doc = coerce_mapping(doc)
        return cls(
            id=coerce_text(doc.get("id")) or None,
            bill_number=coerce_text(doc.get("billNumber")),
            customer=CustomerInfo.from_document(doc.get("customer")),
            order_date=_timestamp(doc.get("orderDate")),
            delivery_date=_timestamp(doc.get("deliveryDate")),
            notes=coerce_text(doc.get("notes")),
            people=[Person.from_document(p) for p in coerce_list(doc.get("people"))],
            payment=Payment.from_document(doc.get("payment")),
            status=coerce_text(doc.get("status")) or ORDER_STATUS_ACTIVE,
            updated_at=_timestamp(doc.get("updatedAt")),
        )

    def to_document(self) -> dict:
        return {
            "billNumber": self.bill_number,
            "customer": self.customer.to_document(),
            "orderDate": self.order_date,
            "deliveryDate": self.delivery_date,
            "notes": self.notes,
            "people": [p.to_document() for p in self.people],
            "payment": self.payment.to_document(),
            "status": self.status,
            "updatedAt": self.updated_at,
        }

    def iter_items(self):
        """Yield (person_index, item_index, person, item) over every item."""
        for p_idx, person in enumerate(self.people):
            for i_idx, item in enumerate(person.items):
                yield p_idx, i_idx, person, item


def as_order(value: Any) -> Order:
    """Accept an Order or a raw stored document."""
    if isinstance(value, Order):
        return value
    return Order.from_document(value)


def people_to_document(people: List[Person]) -> List[dict]:
    return [p.to_document() for p in people]
