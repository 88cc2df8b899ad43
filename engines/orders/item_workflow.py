"""
Tailorbook Orders Engine — Item Status / Assignment Workflow
==============================================================
One field of one item in a committed order changes at a time:

    CLEAN ──edit──→ PENDING(snapshot) ──store ok──→ CLEAN
                                      └─store error─→ ROLLED_BACK (snapshot restored)

The view sees the change before the store confirms it. Equal values
short-circuit: no write, no view update. The whole ``people`` array is
written back; the store is not assumed to merge deep paths.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from core.auth.provider import PrincipalProvider, collection_path
from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import ShopRules
from core.store.errors import StoreError
from core.store.protocol import DocumentStore
from engines.orders.errors import InvalidItemPath, OrderValidationError
from engines.orders.schemas import ITEM_STATUSES, Order, people_to_document

logger = logging.getLogger("tailorbook.workflow")

STATE_CLEAN = "clean"
STATE_PENDING = "pending"
STATE_ROLLED_BACK = "rolled_back"

OUTCOME_NOOP = "noop"
OUTCOME_COMMITTED = "committed"
OUTCOME_ROLLED_BACK = "rolled_back"

EDITABLE_FIELDS = ("status", "cutter", "sewer")

ViewStateCallback = Callable[[Order], None]
NoticeCallback = Callable[[str], None]


@dataclass(frozen=True)
class EditResult:
    outcome: str
    order: Order
    notice: str = ""

    @property
    def committed(self) -> bool:
        return self.outcome == OUTCOME_COMMITTED


def _field_rejection(code: str, message: str) -> OrderValidationError:
    return OrderValidationError(RejectionReason(
        code=code,
        message=message,
        policy_name="item_field_edit_policy",
    ))


class ItemFieldEditor:
    """
    Optimistic editor for item status and worker assignment.

    ``on_view_state`` receives the order the view should show: first the
    modified copy, then the snapshot again if the store refuses.
    """

    def __init__(self, *, store: DocumentStore,
                 principal_provider: PrincipalProvider,
                 rules: ShopRules,
                 on_view_state: ViewStateCallback,
                 on_notice: Optional[NoticeCallback] = None):
        self._store = store
        self._principal_provider = principal_provider
        self._rules = rules
        self._on_view_state = on_view_state
        self._on_notice = on_notice
        self.state = STATE_CLEAN

    def edit(self, order: Order, person_index: int, item_index: int,
             field_name: str, value: Any) -> EditResult:
        if field_name not in EDITABLE_FIELDS:
            raise _field_rejection(
                ReasonCode.INVALID_ITEM_FIELD,
                f"Field '{field_name}' cannot be edited on a committed item.",
            )
        if field_name == "status" and value not in ITEM_STATUSES:
            raise _field_rejection(
                ReasonCode.INVALID_ITEM_STATUS,
                f"Unknown item status: {value!r}.",
            )
        if not order.id:
            raise ValueError("Only stored orders can be edited in place.")
        if not 0 <= person_index < len(order.people):
            raise InvalidItemPath(person_index)
        if not 0 <= item_index < len(order.people[person_index].items):
            raise InvalidItemPath(person_index, item_index)

        value = value or ""
        current = getattr(order.people[person_index].items[item_index], field_name)
        if current == value:
            return EditResult(outcome=OUTCOME_NOOP, order=order)

        orders_path = collection_path(self._principal_provider, self._rules, "orders")
        snapshot = copy.deepcopy(order)
        modified = copy.deepcopy(order)
        setattr(modified.people[person_index].items[item_index], field_name, value)

        self.state = STATE_PENDING
        self._on_view_state(modified)
        try:
            self._store.update(
                orders_path, order.id, {"people": people_to_document(modified.people)},
            )
        except StoreError as exc:
            logger.warning(
                f"Item {field_name} edit on order {order.id} refused, rolling back: {exc}",
                exc_info=True,
            )
            notice = self._roll_back(snapshot, field_name)
            return EditResult(outcome=OUTCOME_ROLLED_BACK, order=snapshot, notice=notice)
        except Exception:
            self._roll_back(snapshot, field_name)
            raise

        self.state = STATE_CLEAN
        logger.info(
            f"Order {order.id} item [{person_index}][{item_index}] "
            f"{field_name} → {value!r}"
        )
        return EditResult(outcome=OUTCOME_COMMITTED, order=modified)

    def _roll_back(self, snapshot: Order, field_name: str) -> str:
        self._on_view_state(snapshot)
        self.state = STATE_ROLLED_BACK
        label = "status" if field_name == "status" else "assignment"
        notice = f"Failed to update item {label}. Changes were reverted."
        if self._on_notice is not None:
            self._on_notice(notice)
        return notice
