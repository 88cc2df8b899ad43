"""Tailorbook order draft editing tests."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from core.config.rules import ShopRules
from core.time.clock import FixedClock
from engines.orders.draft import (
    MANUAL_FEE,
    add_fee,
    add_item,
    add_person,
    load_draft,
    new_draft,
    remove_fee,
    remove_item,
    remove_person,
    set_customer_field,
    set_fee_field,
    set_item_field,
    set_order_field,
    set_payment_field,
    set_person_name,
)
from engines.orders.errors import InvalidItemPath
from projections.orders.financials import compute_financial_totals

NOW = datetime(2025, 4, 10, 9, 0, 0, tzinfo=timezone.utc)
KOLKATA = ZoneInfo("Asia/Kolkata")
RULES = ShopRules(time_zone="Asia/Kolkata", default_payment_method="UPI")

MASTER_ITEMS = [
    {"id": "m-1", "name": "Shirt", "customerPrice": 800, "cuttingRate": 50,
     "sewingRate": 250, "requiredMeasurements": "Chest, Length, , Sleeve"},
    {"id": "m-2", "name": "Trouser", "customerPrice": 600, "cuttingRate": 40,
     "sewingRate": 200, "requiredMeasurements": ""},
]
FEES = [{"id": "f-1", "description": "Express", "defaultAmount": 150}]


def fresh():
    return new_draft(FixedClock(NOW), RULES)


def assert_totals_hold(draft):
    payment = draft.order.payment
    totals = compute_financial_totals(draft.order)
    assert payment.total == totals.subtotal + totals.fees_total - totals.discount_amount
    assert payment.pending == payment.total - payment.advance
    assert payment.subtotal == totals.subtotal
    assert payment.calculated_discount == totals.discount_amount


class TestNewDraft:
    def test_seeded_shape(self):
        draft = fresh()
        order = draft.order
        assert draft.is_new
        assert not draft.person_name_overridden
        assert order.bill_number == f"TH-{int(NOW.timestamp() * 1000)}"
        assert len(order.people) == 1
        assert len(order.people[0].items) == 1
        assert order.payment.method == "UPI"
        assert order.delivery_date == datetime(2025, 4, 10, tzinfo=KOLKATA)

    def test_edits_never_mutate_input(self):
        draft = fresh()
        edited = set_customer_field(draft, "name", "Ravi")
        assert draft.order.customer.name == ""
        assert edited.order.customer.name == "Ravi"


class TestPersonNameFollowsCustomer:
    def test_first_person_follows_customer_name(self):
        draft = set_customer_field(fresh(), "name", "Ravi")
        assert draft.order.people[0].name == "Ravi"

    def test_override_stops_following(self):
        draft = set_customer_field(fresh(), "name", "Ravi")
        draft = set_person_name(draft, 0, "Asha")
        draft = set_customer_field(draft, "name", "Ravi Kumar")
        assert draft.person_name_overridden
        assert draft.order.people[0].name == "Asha"

    def test_clearing_override_resumes_following(self):
        draft = set_customer_field(fresh(), "name", "Ravi")
        draft = set_person_name(draft, 0, "Asha")
        draft = set_person_name(draft, 0, "")
        assert not draft.person_name_overridden
        assert draft.order.people[0].name == "Ravi"

    def test_matching_customer_name_resets_override(self):
        draft = set_person_name(fresh(), 0, "Asha")
        draft = set_customer_field(draft, "name", "Asha")
        assert not draft.person_name_overridden
        draft = set_customer_field(draft, "name", "Asha R")
        assert draft.order.people[0].name == "Asha R"

    def test_other_people_never_follow(self):
        draft = add_person(fresh())
        draft = set_customer_field(draft, "name", "Ravi")
        assert draft.order.people[1].name == ""

    def test_unknown_customer_field(self):
        with pytest.raises(ValueError):
            set_customer_field(fresh(), "address", "x")


class TestFloors:
    def test_last_person_cannot_be_removed(self):
        draft = remove_person(fresh(), 0)
        assert len(draft.order.people) == 1

    def test_last_item_cannot_be_removed(self):
        draft = remove_item(fresh(), 0, 0)
        assert len(draft.order.people[0].items) == 1

    def test_removal_above_floor(self):
        draft = add_item(add_person(fresh()), 1)
        draft = remove_item(draft, 1, 0)
        assert len(draft.order.people[1].items) == 1
        draft = remove_person(draft, 1)
        assert len(draft.order.people) == 1

    def test_removing_first_person_recomputes_override(self):
        draft = set_customer_field(fresh(), "name", "Ravi")
        draft = add_person(draft)
        draft = set_person_name(draft, 1, "Asha")
        draft = remove_person(draft, 0)
        assert draft.order.people[0].name == "Asha"
        assert draft.person_name_overridden

    def test_invalid_indices(self):
        with pytest.raises(InvalidItemPath):
            add_item(fresh(), 3)
        with pytest.raises(InvalidItemPath):
            set_item_field(fresh(), 0, 4, "price", 10)


class TestItemFields:
    def test_master_item_name_copies_price_and_measurement_slots(self):
        draft = set_item_field(fresh(), 0, 0, "name", "Shirt", MASTER_ITEMS)
        item = draft.order.people[0].items[0]
        assert item.price == 800
        assert item.measurements == {"Chest": "", "Length": "", "Sleeve": ""}
        assert draft.order.payment.subtotal == 800
        assert_totals_hold(draft)

    def test_price_is_a_one_time_default(self):
        draft = set_item_field(fresh(), 0, 0, "name", "Shirt", MASTER_ITEMS)
        draft = set_item_field(draft, 0, 0, "price", "750")
        assert draft.order.people[0].items[0].price == 750
        assert draft.order.payment.total == 750

    def test_unknown_name_keeps_price(self):
        draft = set_item_field(fresh(), 0, 0, "price", 500)
        draft = set_item_field(draft, 0, 0, "name", "Sherwani", MASTER_ITEMS)
        assert draft.order.people[0].items[0].price == 500

    def test_measurements_route_into_mapping(self):
        draft = set_item_field(fresh(), 0, 0, "Chest", "40")
        assert draft.order.people[0].items[0].measurements["Chest"] == "40"

    def test_unreadable_price_is_zero(self):
        draft = set_item_field(fresh(), 0, 0, "price", "abc")
        assert draft.order.people[0].items[0].price == 0

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            set_item_field(fresh(), 0, 0, "colour", "red")


class TestPaymentAndFees:
    def test_total_invariant_after_every_operation(self):
        draft = set_item_field(fresh(), 0, 0, "name", "Shirt", MASTER_ITEMS)
        steps = [
            lambda d: add_person(d),
            lambda d: set_item_field(d, 1, 0, "name", "Trouser", MASTER_ITEMS),
            lambda d: set_payment_field(d, "advance", "500"),
            lambda d: set_payment_field(d, "discountType", "percent"),
            lambda d: set_payment_field(d, "discountValue", 10),
            lambda d: add_fee(d),
            lambda d: remove_item(d, 1, 0),
            lambda d: remove_person(d, 1),
        ]
        for step in steps:
            draft = step(draft)
            assert_totals_hold(draft)

    def test_advance_is_clamped(self):
        draft = set_payment_field(fresh(), "advance", -50)
        assert draft.order.payment.advance == 0

    def test_catalog_fee_copies_amount(self):
        draft = add_fee(fresh())
        fee_id = draft.order.payment.additional_fees[0].id
        draft = set_fee_field(draft, fee_id, "select", "Express", FEES)
        fee = draft.order.payment.additional_fees[0]
        assert (fee.description, fee.amount, fee.is_manual_description) == ("Express", 150, False)
        assert draft.order.payment.total == 150

    def test_catalog_description_is_locked(self):
        draft = add_fee(fresh())
        fee_id = draft.order.payment.additional_fees[0].id
        draft = set_fee_field(draft, fee_id, "select", "Express", FEES)
        draft = set_fee_field(draft, fee_id, "description", "Typed")
        assert draft.order.payment.additional_fees[0].description == "Express"

    def test_manual_fee(self):
        draft = add_fee(fresh())
        fee_id = draft.order.payment.additional_fees[0].id
        draft = set_fee_field(draft, fee_id, "select", MANUAL_FEE, FEES)
        draft = set_fee_field(draft, fee_id, "description", "Embroidery")
        draft = set_fee_field(draft, fee_id, "amount", "250")
        fee = draft.order.payment.additional_fees[0]
        assert (fee.description, fee.amount) == ("Embroidery", 250)

    def test_remove_fee(self):
        draft = add_fee(fresh())
        fee_id = draft.order.payment.additional_fees[0].id
        draft = remove_fee(set_fee_field(draft, fee_id, "amount", 99), fee_id)
        assert draft.order.payment.additional_fees == []
        assert draft.order.payment.total == 0

    def test_unknown_payment_field(self):
        with pytest.raises(ValueError):
            set_payment_field(fresh(), "tip", 5)


class TestOrderFields:
    def test_delivery_date_is_local_midnight(self):
        draft = set_order_field(fresh(), "deliveryDate", "2025-04-20", KOLKATA)
        assert draft.order.delivery_date == datetime(2025, 4, 20, tzinfo=KOLKATA)

    def test_unreadable_delivery_date_clears_it(self):
        draft = set_order_field(fresh(), "deliveryDate", "soon", KOLKATA)
        assert draft.order.delivery_date is None

    def test_unknown_order_field(self):
        with pytest.raises(ValueError):
            set_order_field(fresh(), "billNumber", "X")


class TestLoadDraft:
    def test_partial_document_gets_floors_and_totals(self):
        draft = load_draft({"billNumber": "TH-9", "customer": {"name": "Ravi"}}, doc_id="o-1")
        assert not draft.is_new
        assert draft.order.id == "o-1"
        assert len(draft.order.people) == 1
        assert len(draft.order.people[0].items) == 1
        assert draft.order.payment.total == 0

    def test_required_measurements_merge_with_existing(self):
        document = {
            "customer": {"name": "Ravi"},
            "people": [{"name": "Ravi", "items": [
                {"id": "i-1", "name": "Shirt", "price": 800, "measurements": {"Chest": "40", "Neck": "15"}},
            ]}],
        }
        draft = load_draft(document, MASTER_ITEMS)
        measurements = draft.order.people[0].items[0].measurements
        assert measurements == {"Chest": "40", "Length": "", "Sleeve": "", "Neck": "15"}
        assert not draft.person_name_overridden

    def test_override_flag_from_stored_names(self):
        document = {"customer": {"name": "Ravi"}, "people": [{"name": "Asha", "items": []}]}
        assert load_draft(document).person_name_overridden
