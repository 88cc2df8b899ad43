"""
Tailorbook Django Adapter Wiring
==================================
Constructs TailorbookDependencies for local/staging live runs.

This module is adapter-only glue:
- no core contract changes
- documents persist through the Django-backed document store
- shop rules come from settings.TAILORBOOK
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from core.auth.provider import (
    ROLE_OWNER,
    ROLE_STAFF,
    InMemoryApiKeyDirectory,
    Principal,
)
from core.config.rules import ShopRules, load_shop_rules
from core.store.protocol import DocumentStore
from core.time.clock import Clock, SystemClock


DEV_OWNER_API_KEY = "dev-owner-key"
DEV_STAFF_API_KEY = "dev-staff-key"

_DEV_OWNER_ID = "live-owner-user"
_DEV_STAFF_ID = "live-staff-user"

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: Optional["TailorbookDependencies"] = None


@dataclass(frozen=True)
class TailorbookDependencies:
    store: DocumentStore
    clock: Clock
    rules: ShopRules
    api_keys: InMemoryApiKeyDirectory


def _build_api_keys() -> InMemoryApiKeyDirectory:
    return InMemoryApiKeyDirectory(
        {
            DEV_OWNER_API_KEY: Principal(
                principal_id=_DEV_OWNER_ID, role=ROLE_OWNER, display_name="Owner",
            ),
            DEV_STAFF_API_KEY: Principal(
                principal_id=_DEV_STAFF_ID, role=ROLE_STAFF, display_name="Staff",
            ),
        }
    )


def _create_dependencies() -> TailorbookDependencies:
    from core.store.django_store import DjangoDocumentStore

    return TailorbookDependencies(
        store=DjangoDocumentStore(),
        clock=SystemClock(),
        rules=load_shop_rules(),
        api_keys=_build_api_keys(),
    )


def build_dependencies() -> TailorbookDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def set_dependencies(dependencies: Optional[TailorbookDependencies]) -> None:
    """Replace the wired bundle (testing only). None resets to lazy wiring."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = dependencies
