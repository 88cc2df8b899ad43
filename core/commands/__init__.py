"""
Tailorbook Command Layer — Public API
=======================================
Refused writes are first-class: every rejection carries a code,
a message and the policy that raised it.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
