"""
Tailorbook Core Config — Public API
=====================================
Shop rules (bill prefix, currency, upload limit, time zone).
Doctrine: No hardcoded shop constants in engine logic.
"""

from core.config.rules import (
    DEFAULT_MAX_UPLOAD_BYTES,
    ShopRules,
    load_shop_rules,
)

__all__ = [
    "DEFAULT_MAX_UPLOAD_BYTES",
    "ShopRules",
    "load_shop_rules",
]
