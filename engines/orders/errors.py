"""
Tailorbook Orders Engine — Errors
===================================
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import RejectionReason


class OrderError(Exception):
    """Base class for order engine failures."""


class OrderValidationError(OrderError):
    """The draft failed a commit policy. Nothing was written."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(reason.message)

    @property
    def step(self) -> Optional[int]:
        return self.reason.step


class OrderCommitError(OrderError):
    """The store refused the write. The caller's draft is untouched."""


class InvalidItemPath(OrderError, IndexError):
    """No item at (person_index, item_index)."""

    def __init__(self, person_index: int, item_index: Optional[int] = None):
        self.person_index = person_index
        self.item_index = item_index
        if item_index is None:
            message = f"No person at index {person_index}."
        else:
            message = f"No item at person {person_index}, item {item_index}."
        super().__init__(message)
