"""
Tailorbook Auth — Principal Provider
======================================
The core never logs anyone in. It only asks "who is the current
authenticated principal, or none?" and refuses data access when the
answer is none (or a principal that has not finished signing in).

Collection paths are namespaced per app id:
    artifacts/<app_id>/public/data/<collection>
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol

from core.config.rules import ShopRules


ROLE_OWNER = "owner"
ROLE_STAFF = "staff"


class NotAuthenticatedError(PermissionError):
    """Raised when data access is attempted without a signed-in principal."""


@dataclass(frozen=True)
class Principal:
    principal_id: str
    is_fully_authenticated: bool = True
    role: str = ROLE_OWNER
    display_name: str = ""

    def __post_init__(self):
        if not self.principal_id or not isinstance(self.principal_id, str):
            raise ValueError("principal_id must be a non-empty string.")
        if not self.role or not isinstance(self.role, str):
            raise ValueError("role must be a non-empty string.")


class PrincipalProvider(Protocol):
    def current_principal(self) -> Optional[Principal]:
        ...


class InMemoryPrincipalProvider:
    """
    Deterministic principal provider for tests/bootstrap.
    """

    def __init__(self, principal: Optional[Principal] = None):
        self._principal = principal

    def current_principal(self) -> Optional[Principal]:
        return self._principal

    def sign_in(self, principal: Principal) -> None:
        self._principal = principal

    def sign_out(self) -> None:
        self._principal = None


class InMemoryApiKeyDirectory:
    """
    Deterministic API key → principal lookup for the HTTP adapter.
    """

    def __init__(self, api_key_to_principal: Optional[Mapping[str, Principal]] = None):
        normalized: Dict[str, Principal] = {}
        for api_key, principal in dict(api_key_to_principal or {}).items():
            if not isinstance(api_key, str) or not api_key.strip():
                raise ValueError("API key must be a non-empty string.")
            if not isinstance(principal, Principal):
                raise ValueError("Principal must be a Principal.")
            normalized[api_key] = principal
        self._api_key_to_principal = normalized

    def resolve_api_key(self, api_key: Optional[str]) -> Optional[Principal]:
        if not isinstance(api_key, str):
            return None
        return self._api_key_to_principal.get(api_key)

    def provider_for(self, api_key: Optional[str]) -> InMemoryPrincipalProvider:
        return InMemoryPrincipalProvider(self.resolve_api_key(api_key))


def require_principal(provider: PrincipalProvider) -> Principal:
    principal = provider.current_principal()
    if principal is None:
        raise NotAuthenticatedError("No authenticated principal for data access.")
    if not principal.is_fully_authenticated:
        raise NotAuthenticatedError(
            f"Principal '{principal.principal_id}' is not fully authenticated."
        )
    return principal


def collection_path(
    provider: PrincipalProvider, rules: ShopRules, collection: str,
) -> str:
    """Resolve a collection path; refuses without a fully-authenticated principal."""
    if not collection or "/" in collection:
        raise ValueError("collection must be a single non-empty path segment.")
    require_principal(provider)
    return f"artifacts/{rules.app_id}/public/data/{collection}"
