"""
Tailorbook Core Time — Temporal Helpers
=========================================
Pure functions for timestamp parsing and interval logic.
All functions take explicit arguments — no hidden clock access.

Stored documents carry timestamps in several shapes (native datetimes
from the store, ISO strings from older exports, epoch numbers, or a
``{"seconds": ...}`` mapping). parse_timestamp() accepts all of them and
returns None for anything it cannot read; it never raises.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# PARSING
# ══════════════════════════════════════════════════════════════

# Values within a day of the datetime limits cannot be shifted to another zone.
_EARLIEST = datetime.min + timedelta(days=1)
_LATEST = datetime.max - timedelta(days=1)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a stored timestamp into a datetime."""
    return _in_range(_parse(value))


def _parse(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch(value)
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _from_epoch(seconds)
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
        for fmt in ("%Y/%m/%d", "%d/%m/%Y"):
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    return None


def _in_range(moment: Optional[datetime]) -> Optional[datetime]:
    """Drop values that would overflow when converted to a shop zone."""
    if moment is None:
        return None
    wall = moment.replace(tzinfo=None)
    if not _EARLIEST <= wall <= _LATEST:
        return None
    if moment.tzinfo is not None:
        try:
            utc_wall = moment.astimezone(timezone.utc).replace(tzinfo=None)
        except (OverflowError, ValueError):
            return None
        if not _EARLIEST <= utc_wall <= _LATEST:
            return None
    return moment


def _from_epoch(number: float) -> Optional[datetime]:
    # Values this large are milliseconds, not seconds.
    seconds = number / 1000 if abs(number) > 10_000_000_000 else number
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Express ``moment`` in ``tz``; naive values are taken as already local."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def parse_date_input(value: Any, tz: tzinfo) -> Optional[datetime]:
    """
    Read a form date ("YYYY-MM-DD" or a datetime) as local midnight.

    Returns None when the value cannot be read.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    local = to_local(parsed, tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(start_day: Any, end_day: Any, tz: tzinfo) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Inclusive [start-of-start_day, end-of-end_day] bounds; either side may be open.
    """
    start = parse_date_input(start_day, tz) if start_day else None
    end = parse_date_input(end_day, tz) if end_day else None
    if end is not None:
        end = end + timedelta(days=1) - timedelta(microseconds=1)
    return start, end
