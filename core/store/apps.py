"""
Tailorbook Core — Document Store App Configuration
====================================================
Relational backing for the document store collaborator.

This app:
- Persists schemaless shop documents (orders, workers, ledger rows)
- Applies multi-document batches atomically
- Notifies live subscribers after commit

This app does NOT:
- Interpret document meaning
- Derive totals or reports
"""

from django.apps import AppConfig


class DocumentStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.store"
    label = "document_store"
    verbose_name = "Tailorbook Document Store"
