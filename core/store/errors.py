"""
Tailorbook Document Store — Errors
====================================
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for document store failures."""


class StoreWriteError(StoreError):
    """A create/update/delete/batch could not be applied. Nothing was written."""


class DocumentNotFound(StoreWriteError):
    """The addressed document does not exist."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document '{doc_id}' not found in '{collection}'.")
