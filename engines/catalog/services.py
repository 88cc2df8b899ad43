"""
Tailorbook Catalog Engine — Application Service
=================================================
Create / update / delete for the shop catalog and the ledger:

    tailoringItems   master items (garment types, prices, pay rates)
    additionalFees   fee definitions
    workers          workers; payouts live under workers/<id>/payments
    transactions     manual Expense entries

Input values arrive as stored-shape mappings (camelCase keys) and are
coerced through the entity schemas before any policy runs.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from core.auth.provider import PrincipalProvider, collection_path
from core.commands.rejection import RejectionReason
from core.config.rules import ShopRules
from core.store.errors import StoreError
from core.store.protocol import DocumentStore
from core.time.clock import Clock
from engines.catalog.errors import CatalogValidationError, CatalogWriteError
from engines.catalog.policies import (
    expense_entry_policy,
    fee_description_required_policy,
    master_item_name_required_policy,
    worker_details_required_policy,
    worker_payment_positive_policy,
)
from engines.catalog.schemas import (
    TRANSACTION_EXPENSE,
    FeeDefinition,
    MasterItem,
    Transaction,
    Worker,
    WorkerPayment,
)

logger = logging.getLogger("tailorbook.catalog")

MASTER_ITEMS = "tailoringItems"
FEE_DEFINITIONS = "additionalFees"
WORKERS = "workers"
TRANSACTIONS = "transactions"
PAYMENTS = "payments"


class CatalogService:
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

    def payments_path(self, worker_id: str) -> str:
        if not worker_id or "/" in worker_id:
            raise ValueError("worker_id must be a single non-empty path segment.")
        return f"{self._path(WORKERS)}/{worker_id}/{PAYMENTS}"

    # ── Generic write path ────────────────────────────────────

    def _save(
        self,
        collection: str,
        document: dict,
        policy: Callable[[Any], Optional[RejectionReason]],
        entity: Any,
        doc_id: Optional[str] = None,
    ) -> str:
        rejection = policy(entity)
        if rejection is not None:
            raise CatalogValidationError(rejection)
        try:
            if doc_id:
                self._store.update(collection, doc_id, document)
            else:
                doc_id = self._store.create(collection, document)
        except StoreError as exc:
            logger.error(f"Write to {collection} failed: {exc}", exc_info=True)
            raise CatalogWriteError(f"Failed to save entry in {collection}: {exc}") from exc
        logger.info(f"Saved {collection}/{doc_id}")
        return doc_id

    def _delete(self, collection: str, doc_id: str) -> None:
        try:
            self._store.delete(collection, doc_id)
        except StoreError as exc:
            logger.error(f"Delete of {collection}/{doc_id} failed: {exc}", exc_info=True)
            raise CatalogWriteError(f"Failed to delete {doc_id}: {exc}") from exc
        logger.info(f"Deleted {collection}/{doc_id}")

    # ── Master items ──────────────────────────────────────────

    def save_master_item(self, values: Mapping[str, Any], doc_id: Optional[str] = None) -> str:
        item = MasterItem.from_document(dict(values))
        item.name = item.name.strip()
        item.required_measurements = item.required_measurements.strip()
        return self._save(
            self._path(MASTER_ITEMS), item.to_document(),
            master_item_name_required_policy, item, doc_id,
        )

    def delete_master_item(self, doc_id: str) -> None:
        self._delete(self._path(MASTER_ITEMS), doc_id)

    # ── Fee definitions ───────────────────────────────────────

    def save_fee_definition(self, values: Mapping[str, Any], doc_id: Optional[str] = None) -> str:
        fee = FeeDefinition.from_document(dict(values))
        fee.description = fee.description.strip()
        return self._save(
            self._path(FEE_DEFINITIONS), fee.to_document(),
            fee_description_required_policy, fee, doc_id,
        )

    def delete_fee_definition(self, doc_id: str) -> None:
        self._delete(self._path(FEE_DEFINITIONS), doc_id)

    # ── Workers ───────────────────────────────────────────────

    def save_worker(self, values: Mapping[str, Any], doc_id: Optional[str] = None) -> str:
        worker = Worker.from_document(dict(values))
        worker.name = worker.name.strip()
        worker.category = worker.category.strip()
        worker.specialization = worker.specialization.strip()
        worker.contact = worker.contact.strip()
        return self._save(
            self._path(WORKERS), worker.to_document(),
            worker_details_required_policy, worker, doc_id,
        )

    def delete_worker(self, doc_id: str) -> None:
        self._delete(self._path(WORKERS), doc_id)

    def record_worker_payment(self, worker_id: str, values: Mapping[str, Any]) -> str:
        """Append a payout; the date is always the commit time."""
        payment = WorkerPayment.from_document(dict(values), worker_id=worker_id)
        payment.date = self._clock.now_utc()
        payment.notes = payment.notes.strip()
        payment.method = payment.method or self._rules.default_payment_method
        return self._save(
            self.payments_path(worker_id), payment.to_document(),
            worker_payment_positive_policy, payment,
        )

    # ── Ledger ────────────────────────────────────────────────

    def record_expense(self, values: Mapping[str, Any]) -> str:
        entry = Transaction.from_document(dict(values))
        entry.description = entry.description.strip()
        entry.type = TRANSACTION_EXPENSE
        entry.date = self._clock.now_utc()
        entry.order_ref = None
        return self._save(
            self._path(TRANSACTIONS), entry.to_document(),
            expense_entry_policy, entry,
        )
