"""
Tailorbook Auth — Public API
==============================
"""

from core.auth.provider import (
    ROLE_OWNER,
    ROLE_STAFF,
    InMemoryApiKeyDirectory,
    InMemoryPrincipalProvider,
    NotAuthenticatedError,
    Principal,
    PrincipalProvider,
    collection_path,
    require_principal,
)

__all__ = [
    "ROLE_OWNER",
    "ROLE_STAFF",
    "InMemoryApiKeyDirectory",
    "InMemoryPrincipalProvider",
    "NotAuthenticatedError",
    "Principal",
    "PrincipalProvider",
    "collection_path",
    "require_principal",
]
