"""
Tailorbook Catalog Engine — Errors
====================================
"""

from __future__ import annotations

from core.commands.rejection import RejectionReason


class CatalogError(Exception):
    """Base class for catalog engine failures."""


class CatalogValidationError(CatalogError):
    """The entry failed a policy. Nothing was written."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(reason.message)


class CatalogWriteError(CatalogError):
    """The store refused the write."""
