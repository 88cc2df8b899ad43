"""
Tailorbook Core Config — Shop Rules
=====================================
Doctrine: no hardcoded shop constants in engine logic.
The bill-number prefix, currency, default payment method, upload size
limit and shop time zone come from configuration (Django settings
``TAILORBOOK``), not from source code.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Mapping, Optional

from core.time.clock import resolve_timezone


DEFAULT_APP_ID = "default-theron-app"
DEFAULT_BILL_PREFIX = "TH"
DEFAULT_CURRENCY = "INR"
DEFAULT_PAYMENT_METHOD = "Cash"
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


# ══════════════════════════════════════════════════════════════
# SHOP RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ShopRules:
    """
    Shop-level configuration consumed by engines and projections.

    Fields:
        app_id:               Namespace segment of every collection path.
        bill_prefix:          Prefix of generated bill numbers (``TH-<millis>``).
        currency:             ISO 4217 code used for display.
        default_payment_method: Method preset on new drafts.
        max_upload_bytes:     Client-side design photo size limit.
        time_zone:            IANA zone that anchors "today" / "this month".
    """

    app_id: str = DEFAULT_APP_ID
    bill_prefix: str = DEFAULT_BILL_PREFIX
    currency: str = DEFAULT_CURRENCY
    default_payment_method: str = DEFAULT_PAYMENT_METHOD
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    time_zone: str = "UTC"

    def __post_init__(self) -> None:
        if not self.app_id or not isinstance(self.app_id, str):
            raise ValueError("app_id must be a non-empty string.")
        if not self.bill_prefix or not isinstance(self.bill_prefix, str):
            raise ValueError("bill_prefix must be a non-empty string.")
        if len(self.currency) != 3:
            raise ValueError(
                f"currency must be 3-letter ISO 4217 code, got '{self.currency}'."
            )
        if self.max_upload_bytes <= 0:
            raise ValueError("max_upload_bytes must be positive.")

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.time_zone)

    @classmethod
    def from_settings(cls, values: Optional[Mapping[str, Any]]) -> "ShopRules":
        """Build from a settings mapping; unknown keys are ignored."""
        values = dict(values or {})
        known = {
            key: values[key]
            for key in (
                "app_id", "bill_prefix", "currency",
                "default_payment_method", "max_upload_bytes", "time_zone",
            )
            if key in values and values[key] not in (None, "")
        }
        if "max_upload_bytes" in known:
            known["max_upload_bytes"] = int(known["max_upload_bytes"])
        return cls(**known)


def load_shop_rules() -> ShopRules:
    """Read ``settings.TAILORBOOK`` (infrastructure use only)."""
    from django.conf import settings

    return ShopRules.from_settings(getattr(settings, "TAILORBOOK", None))
