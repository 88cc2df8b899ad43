"""
Tailorbook Primitives — Tolerant Value Coercion
=================================================
Stored documents are schemaless and may predate field additions.
Readers coerce every value instead of trusting it:

- numbers: int/float kept, numeric strings parsed, anything else → default
- text: strings kept, numbers rendered, anything else → ""
- mappings/lists: wrong shape → empty

These helpers never raise.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List


def coerce_number(value: Any, default: float = 0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else default
    if isinstance(value, Decimal):
        return coerce_number(float(value), default)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
        if not math.isfinite(number):
            return default
        return int(number) if number.is_integer() else number
    return default


def non_negative(value: Any) -> float:
    return max(0, coerce_number(value))


def coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def coerce_mapping(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def coerce_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a cashier: 0.5 goes up, never to even."""
    try:
        quantum = Decimal(1).scaleb(-places)
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return 0
    return int(rounded) if places == 0 else float(rounded)


def money(value: float) -> float:
    """Two-decimal money value; integral amounts stay ints."""
    rounded = round_half_up(value, 2)
    return int(rounded) if float(rounded).is_integer() else rounded
