"""
Tailorbook Core Time — Explicit Clock Protocol
================================================
Doctrine: NO datetime.now() inside derivations or draft logic.
Time is injected via the Clock protocol so revenue windows, bill
numbers and ledger dates are reproducible under test.

Shop-local time matters: "today", "this month" and "this year" are
anchored at the shop's local midnight, not at UTC midnight.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Protocol
from zoneinfo import ZoneInfo


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Production clock — real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a fixed timestamp.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        assert clock.now_utc().year == 2025
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        """Advance the fixed time (useful for multi-step test scenarios)."""
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)


# ══════════════════════════════════════════════════════════════
# SHOP-LOCAL HELPERS
# ══════════════════════════════════════════════════════════════

UTC_ALIASES = ("UTC", "Etc/UTC", "Etc/UCT", "UCT", "Zulu", "Etc/Zulu")


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Resolve an IANA zone name; empty and the UTC aliases give timezone.utc."""
    if not name or name in UTC_ALIASES:
        return timezone.utc
    return ZoneInfo(name)


def now_local(clock: Clock, tz: tzinfo) -> datetime:
    """Current time in the shop's local zone."""
    return clock.now_utc().astimezone(tz)


def epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)
