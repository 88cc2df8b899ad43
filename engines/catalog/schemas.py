"""
Tailorbook Catalog Engine — Entity Schemas
============================================
Engine: Catalog (master items, workers, fees, ledger rows)

Same tolerance rules as the order schemas: from_document() never
raises; to_document() emits the stored camelCase shape without the id.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from core.primitives.coercion import coerce_mapping, coerce_number, coerce_text
from core.time.temporal import parse_timestamp


WORKER_CATEGORIES = ("Cutter", "Sewer", "Finisher", "Helper", "Manager", "Other")

TRANSACTION_INCOME = "Income"
TRANSACTION_EXPENSE = "Expense"
TRANSACTION_TYPES = (TRANSACTION_INCOME, TRANSACTION_EXPENSE)


def _id(doc: dict) -> Optional[str]:
    return coerce_text(doc.get("id")) or None


@dataclass
class MasterItem:
    """A garment type: default customer price and worker pay rates."""

    id: Optional[str] = None
    name: str = ""
    customer_price: float = 0
    sewing_rate: float = 0
    cutting_rate: float = 0
    required_measurements: str = ""

    @classmethod
    def from_document(cls, doc: Any) -> "MasterItem":
        doc = coerce_mapping(doc)
        return cls(
            id=_id(doc),
            name=coerce_text(doc.get("name")),
            customer_price=coerce_number(doc.get("customerPrice")),
            sewing_rate=coerce_number(doc.get("sewingRate")),
            cutting_rate=coerce_number(doc.get("cuttingRate")),
            required_measurements=coerce_text(doc.get("requiredMeasurements")),
        )

    @property
    def measurement_fields(self) -> List[str]:
        """requiredMeasurements parsed: comma list, trimmed, blanks dropped."""
        return [f.strip() for f in self.required_measurements.split(",") if f.strip()]

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "customerPrice": self.customer_price,
            "sewingRate": self.sewing_rate,
            "cuttingRate": self.cutting_rate,
            "requiredMeasurements": self.required_measurements,
        }


@dataclass
class Worker:
    id: Optional[str] = None
    name: str = ""
    category: str = ""
    specialization: str = ""
    contact: str = ""

    @classmethod
    def from_document(cls, doc: Any) -> "Worker":
        doc = coerce_mapping(doc)
        return cls(
            id=_id(doc),
            name=coerce_text(doc.get("name")),
            category=coerce_text(doc.get("category")),
            specialization=coerce_text(doc.get("specialization")),
            contact=coerce_text(doc.get("contact")),
        )

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "specialization": self.specialization,
            "contact": self.contact,
        }


@dataclass
class WorkerPayment:
    """A payout to one worker. Stored under the worker's payments collection."""

    id: Optional[str] = None
    worker_id: str = ""
    amount: float = 0
    date: Optional[datetime] = None
    method: str = ""
    notes: str = ""

    @classmethod
    def from_document(cls, doc: Any, worker_id: str = "") -> "WorkerPayment":
        doc = coerce_mapping(doc)
        return cls(
            id=_id(doc),
            worker_id=worker_id or coerce_text(doc.get("workerId")),
            amount=coerce_number(doc.get("amount")),
            date=parse_timestamp(doc.get("date")),
            method=coerce_text(doc.get("method")),
            notes=coerce_text(doc.get("notes")),
        )

    def to_document(self) -> dict:
        return {
            "workerId": self.worker_id,
            "amount": self.amount,
            "date": self.date,
            "method": self.method,
            "notes": self.notes,
        }


@dataclass
class Transaction:
    """One ledger row. Income rows created for advances carry order_ref."""

    id: Optional[str] = None
    date: Optional[datetime] = None
    type: str = ""
    description: str = ""
    amount: float = 0
    order_ref: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Any) -> "Transaction":
        doc = coerce_mapping(doc)
        return cls(
            id=_id(doc),
            date=parse_timestamp(doc.get("date")),
            type=coerce_text(doc.get("type")),
            description=coerce_text(doc.get("description")),
            amount=coerce_number(doc.get("amount")),
            order_ref=coerce_text(doc.get("orderRef")) or None,
        )

    def to_document(self) -> dict:
        doc = {
            "date": self.date,
            "type": self.type,
            "description": self.description,
            "amount": self.amount,
        }
        if self.order_ref:
            doc["orderRef"] = self.order_ref
        return doc


@dataclass
class FeeDefinition:
    """Reusable fee template; attaching it to an order copies the amount."""

    id: Optional[str] = None
    description: str = ""
    default_amount: float = 0

    @classmethod
    def from_document(cls, doc: Any) -> "FeeDefinition":
        doc = coerce_mapping(doc)
        return cls(
            id=_id(doc),
            description=coerce_text(doc.get("description")),
            default_amount=coerce_number(doc.get("defaultAmount")),
        )

    def to_document(self) -> dict:
        return {"description": self.description, "defaultAmount": self.default_amount}


def as_entities(values, cls) -> list:
    """Accept entities or raw documents; skip anything else."""
    result = []
    for value in values or ():
        if isinstance(value, cls):
            result.append(value)
        elif isinstance(value, dict):
            result.append(cls.from_document(value))
    return result
