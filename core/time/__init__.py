"""
Tailorbook Core Time — Public API
===================================
Explicit clock protocol and timestamp helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    epoch_millis,
    now_local,
    resolve_timezone,
)
from core.time.temporal import (
    day_window,
    parse_date_input,
    parse_timestamp,
    to_local,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "epoch_millis",
    "now_local",
    "resolve_timezone",
    "day_window",
    "parse_date_input",
    "parse_timestamp",
    "to_local",
]
