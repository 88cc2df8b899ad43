"""Tailorbook order service tests: commit, sanitize, delete."""

from datetime import datetime, timezone

import pytest

from core.auth.provider import InMemoryPrincipalProvider, NotAuthenticatedError, Principal
from core.config.rules import ShopRules
from core.store import InMemoryDocumentStore, StoreWriteError
from core.time.clock import FixedClock
from engines.orders.draft import (
    add_fee,
    add_person,
    load_draft,
    new_draft,
    set_customer_field,
    set_fee_field,
    set_item_field,
    set_payment_field,
)
from engines.orders.errors import OrderCommitError, OrderValidationError
from engines.orders.schemas import Order
from engines.orders.services import OrderService, advance_description, sanitize_order

NOW = datetime(2025, 4, 10, 9, 0, 0, tzinfo=timezone.utc)
RULES = ShopRules(app_id="shop")
ORDERS = "artifacts/shop/public/data/orders"
TRANSACTIONS = "artifacts/shop/public/data/transactions"


def signed_in():
    return InMemoryPrincipalProvider(Principal(principal_id="owner-1"))


def service(store, provider=None):
    return OrderService(
        store=store,
        principal_provider=provider or signed_in(),
        rules=RULES,
        clock=FixedClock(NOW),
    )


def ready_draft(advance=0):
    draft = new_draft(FixedClock(NOW), RULES)
    draft = set_customer_field(draft, "name", " Ravi Kumar ")
    draft = set_customer_field(draft, "number", "98765 43210")
    draft = set_item_field(draft, 0, 0, "name", "Shirt")
    draft = set_item_field(draft, 0, 0, "price", 800)
    draft = set_item_field(draft, 0, 0, "Chest", " 40 ")
    draft = set_item_field(draft, 0, 0, "Waist", "")
    draft = set_item_field(draft, 0, 0, "Neck", "  ")
    return set_payment_field(draft, "advance", advance)


class TestSanitizeOrder:
    def test_measurements_stripped_and_trimmed(self):
        clean = sanitize_order(ready_draft().order)
        assert clean.people[0].items[0].measurements == {"Chest": "40"}

    def test_unnamed_items_and_empty_people_dropped(self):
        draft = add_person(ready_draft())
        clean = sanitize_order(draft.order)
        assert len(clean.people) == 1
        assert clean.customer.name == "Ravi Kumar"

    def test_fee_lines_without_description_dropped(self):
        draft = add_fee(ready_draft())
        fee_id = draft.order.payment.additional_fees[0].id
        draft = set_fee_field(draft, fee_id, "amount", 100)
        clean = sanitize_order(draft.order)
        assert clean.payment.additional_fees == []
        assert clean.payment.total == 800

    def test_input_untouched(self):
        draft = ready_draft()
        sanitize_order(draft.order)
        assert draft.order.people[0].items[0].measurements["Chest"] == " 40 "

    def test_worker_names_trimmed(self):
        draft = set_item_field(ready_draft(), 0, 0, "cutter", " Suresh ")
        draft = set_item_field(draft, 0, 0, "sewer", "Meena  ")
        item = sanitize_order(draft.order).people[0].items[0]
        assert (item.cutter, item.sewer) == ("Suresh", "Meena")


class TestPlaceOrder:
    def test_create_writes_order_and_advance_in_one_batch(self):
        store = InMemoryDocumentStore()
        result = service(store).commit(ready_draft(advance=300))

        assert result.created
        assert store.write_count == 1
        stored = store.get_once(ORDERS, result.order_id)
        assert stored["customer"]["name"] == "Ravi Kumar"
        assert stored["orderDate"] == NOW
        assert stored["updatedAt"] == NOW
        assert stored["payment"]["total"] == 800
        assert stored["payment"]["pending"] == 500
        assert stored["people"][0]["items"][0]["measurements"] == {"Chest": "40"}

        income = store.get_once(TRANSACTIONS, result.advance_transaction_id)
        assert income["type"] == "Income"
        assert income["amount"] == 300
        assert income["orderRef"] == result.order_id
        assert income["description"] == advance_description(stored["billNumber"])

    def test_no_advance_no_ledger_row(self):
        store = InMemoryDocumentStore()
        result = service(store).commit(ready_draft())
        assert result.advance_transaction_id is None
        assert store.documents(TRANSACTIONS) == []

    def test_validation_failure_writes_nothing(self):
        store = InMemoryDocumentStore()
        draft = set_customer_field(ready_draft(), "number", "")
        with pytest.raises(OrderValidationError) as excinfo:
            service(store).commit(draft)
        assert excinfo.value.step == 1
        assert store.write_count == 0

    def test_store_failure_raises_and_keeps_draft(self):
        store = InMemoryDocumentStore()
        store.fail_next_write(StoreWriteError("offline"))
        draft = ready_draft(advance=300)
        before = draft.copy()
        with pytest.raises(OrderCommitError):
            service(store).commit(draft)
        assert draft == before
        assert store.documents(ORDERS) == []
        assert store.documents(TRANSACTIONS) == []

    def test_refused_without_principal(self):
        store = InMemoryDocumentStore()
        with pytest.raises(NotAuthenticatedError):
            service(store, InMemoryPrincipalProvider()).commit(ready_draft())
        assert store.write_count == 0


class TestUpdateOrder:
    def test_edit_keeps_order_date_and_skips_ledger(self):
        store = InMemoryDocumentStore()
        placed = service(store).commit(ready_draft(advance=300))
        stored = store.get_once(ORDERS, placed.order_id)

        draft = load_draft(stored, doc_id=placed.order_id)
        draft.order.order_date = datetime(2030, 1, 1, tzinfo=timezone.utc)
        draft = set_payment_field(draft, "advance", 800)
        result = OrderService(
            store=store, principal_provider=signed_in(), rules=RULES,
            clock=FixedClock(datetime(2025, 4, 11, tzinfo=timezone.utc)),
        ).commit(draft)

        assert not result.created
        updated = store.get_once(ORDERS, placed.order_id)
        assert updated["orderDate"] == NOW
        assert updated["payment"]["pending"] == 0
        assert updated["updatedAt"] == datetime(2025, 4, 11, tzinfo=timezone.utc)
        assert len(store.documents(TRANSACTIONS)) == 1

    def test_edit_never_issues_a_new_bill_number(self):
        store = InMemoryDocumentStore()
        placed = service(store).commit(ready_draft())

        draft = load_draft(store.get_once(ORDERS, placed.order_id), doc_id=placed.order_id)
        draft.order.bill_number = ""
        result = service(store).commit(draft)

        assert result.bill_number == ""
        assert store.get_once(ORDERS, placed.order_id)["billNumber"] == placed.bill_number

    def test_placed_order_gets_bill_number_when_blank(self):
        store = InMemoryDocumentStore()
        draft = ready_draft()
        draft.order.bill_number = ""
        result = service(store).commit(draft)
        assert result.bill_number.startswith(RULES.bill_prefix)

    def test_edit_failure_is_commit_error(self):
        store = InMemoryDocumentStore()
        draft = load_draft(ready_draft().order.to_document(), doc_id="missing")
        with pytest.raises(OrderCommitError):
            service(store).commit(draft)


class TestDeleteOrder:
    def test_delete_removes_linked_income_only(self):
        store = InMemoryDocumentStore()
        svc = service(store)
        placed = svc.commit(ready_draft(advance=300))
        other = svc.commit(ready_draft(advance=100))
        store.create(TRANSACTIONS, {"type": "Expense", "amount": 50, "description": "Thread"})

        assert svc.delete(placed.order_id) == 1

        assert store.get_once(ORDERS, placed.order_id) is None
        remaining = store.documents(TRANSACTIONS)
        assert len(remaining) == 2
        assert {t.get("orderRef") for t in remaining} == {other.order_id, None}

    def test_delete_failure(self):
        store = InMemoryDocumentStore()
        placed = service(store).commit(ready_draft(advance=300))
        store.fail_next_write()
        with pytest.raises(OrderCommitError):
            service(store).delete(placed.order_id)
        assert store.get_once(ORDERS, placed.order_id) is not None


def test_stored_document_reads_back_as_order():
    store = InMemoryDocumentStore()
    placed = service(store).commit(ready_draft(advance=300))
    order = Order.from_document(store.get_once(ORDERS, placed.order_id))
    assert order.id == placed.order_id
    assert order.payment.advance == 300
