"""
Tailorbook Command Layer — Rejection Model
============================================
Structured reasons for refused writes.

A rejection is reported synchronously, before any store write is
attempted. It is:
- Deterministic (same draft → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Navigable (step: the wizard step the user is sent back to)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a refused write.

    Fields:
        code:        Machine-readable rejection code (e.g. 'CUSTOMER_REQUIRED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
        step:        Optional form step (1-based) holding the offending field.
    """

    code: str
    message: str
    policy_name: str
    step: Optional[int] = None

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

        if self.step is not None and (not isinstance(self.step, int) or self.step < 1):
            raise ValueError("step must be a positive int or None.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
            "step": self.step,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes. Extensible by engines.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Order drafts ──────────────────────────────────────────
    CUSTOMER_DETAILS_REQUIRED = "CUSTOMER_DETAILS_REQUIRED"
    DELIVERY_DATE_REQUIRED = "DELIVERY_DATE_REQUIRED"
    DELIVERY_DATE_INVALID = "DELIVERY_DATE_INVALID"
    NO_PERSON_WITH_ITEMS = "NO_PERSON_WITH_ITEMS"
    PERSON_NAME_REQUIRED = "PERSON_NAME_REQUIRED"

    # ── Catalog / ledger entries ──────────────────────────────
    NAME_REQUIRED = "NAME_REQUIRED"
    CATEGORY_REQUIRED = "CATEGORY_REQUIRED"
    DESCRIPTION_REQUIRED = "DESCRIPTION_REQUIRED"
    AMOUNT_MUST_BE_POSITIVE = "AMOUNT_MUST_BE_POSITIVE"

    # ── Item workflow ─────────────────────────────────────────
    INVALID_ITEM_STATUS = "INVALID_ITEM_STATUS"
    INVALID_ITEM_FIELD = "INVALID_ITEM_FIELD"

    # ── Context / authorization ───────────────────────────────
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
