"""
Tests for core.auth — principal gate and collection paths.
"""

import pytest

from core.auth.provider import (
    ROLE_STAFF,
    InMemoryApiKeyDirectory,
    InMemoryPrincipalProvider,
    NotAuthenticatedError,
    Principal,
    collection_path,
    require_principal,
)
from core.config.rules import ShopRules

RULES = ShopRules(app_id="shop-1")


class TestRequirePrincipal:
    def test_no_principal_is_refused(self):
        with pytest.raises(NotAuthenticatedError):
            require_principal(InMemoryPrincipalProvider())

    def test_partially_signed_in_principal_is_refused(self):
        provider = InMemoryPrincipalProvider(
            Principal(principal_id="u-1", is_fully_authenticated=False),
        )
        with pytest.raises(NotAuthenticatedError, match="not fully authenticated"):
            require_principal(provider)

    def test_sign_in_and_out(self):
        provider = InMemoryPrincipalProvider()
        provider.sign_in(Principal(principal_id="u-1"))
        assert require_principal(provider).principal_id == "u-1"
        provider.sign_out()
        assert provider.current_principal() is None

    def test_principal_requires_id(self):
        with pytest.raises(ValueError):
            Principal(principal_id="")


class TestCollectionPath:
    def test_namespaced_by_app_id(self):
        provider = InMemoryPrincipalProvider(Principal(principal_id="u-1"))
        assert collection_path(provider, RULES, "orders") == (
            "artifacts/shop-1/public/data/orders"
        )

    def test_refused_without_principal(self):
        with pytest.raises(NotAuthenticatedError):
            collection_path(InMemoryPrincipalProvider(), RULES, "orders")

    def test_rejects_nested_segment(self):
        provider = InMemoryPrincipalProvider(Principal(principal_id="u-1"))
        with pytest.raises(ValueError):
            collection_path(provider, RULES, "workers/w-1")


class TestApiKeyDirectory:
    def test_resolves_known_key(self):
        staff = Principal(principal_id="s-1", role=ROLE_STAFF)
        directory = InMemoryApiKeyDirectory({"key-1": staff})
        assert directory.resolve_api_key("key-1") == staff
        assert directory.provider_for("key-1").current_principal() == staff

    def test_unknown_or_missing_key(self):
        directory = InMemoryApiKeyDirectory({"key-1": Principal(principal_id="s-1")})
        assert directory.resolve_api_key("nope") is None
        assert directory.provider_for(None).current_principal() is None

    def test_rejects_blank_key(self):
        with pytest.raises(ValueError):
            InMemoryApiKeyDirectory({" ": Principal(principal_id="s-1")})
