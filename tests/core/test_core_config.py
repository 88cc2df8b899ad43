"""
Tests for core.config — Shop rules.
"""

import pytest
from datetime import timezone
from zoneinfo import ZoneInfo

from core.config.rules import DEFAULT_APP_ID, ShopRules, load_shop_rules


class TestShopRules:
    def test_defaults(self):
        rules = ShopRules()
        assert rules.app_id == DEFAULT_APP_ID
        assert rules.bill_prefix == "TH"
        assert rules.default_payment_method == "Cash"
        assert rules.max_upload_bytes == 5 * 1024 * 1024
        assert rules.tz == timezone.utc

    def test_from_settings_ignores_unknown_and_blank(self):
        rules = ShopRules.from_settings({
            "app_id": "shop-7",
            "bill_prefix": "",
            "max_upload_bytes": "1024",
            "time_zone": "Asia/Kolkata",
            "colour": "blue",
        })
        assert rules.app_id == "shop-7"
        assert rules.bill_prefix == "TH"
        assert rules.max_upload_bytes == 1024
        assert rules.tz == ZoneInfo("Asia/Kolkata")

    def test_from_settings_none(self):
        assert ShopRules.from_settings(None) == ShopRules()

    def test_rejects_bad_currency(self):
        with pytest.raises(ValueError, match="currency"):
            ShopRules(currency="RUPEE")

    def test_rejects_non_positive_upload_limit(self):
        with pytest.raises(ValueError, match="max_upload_bytes"):
            ShopRules(max_upload_bytes=0)

    def test_frozen_immutability(self):
        rules = ShopRules()
        with pytest.raises(AttributeError):
            rules.app_id = "other"


class TestLoadShopRules:
    def test_reads_django_settings(self, settings):
        settings.TAILORBOOK = {"app_id": "settings-shop", "time_zone": "UTC"}
        rules = load_shop_rules()
        assert rules.app_id == "settings-shop"
        assert rules.tz == timezone.utc
