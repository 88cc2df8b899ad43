"""
Tailorbook Core Primitives — Tolerant Value Coercion
=====================================================
Pure Python, no Django dependency. Stored documents may be partial or
carry wrong types; every reader goes through these helpers.
"""

from core.primitives.coercion import (
    coerce_list,
    coerce_mapping,
    coerce_number,
    coerce_text,
    money,
    non_negative,
    round_half_up,
)

__all__ = [
    "coerce_list",
    "coerce_mapping",
    "coerce_number",
    "coerce_text",
    "money",
    "non_negative",
    "round_half_up",
]
