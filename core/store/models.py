"""
Tailorbook Document Store — Stored Document Model
===================================================
One row per document. ``collection`` is the full namespaced path
(artifacts/<app_id>/public/data/<name>); ``data`` holds the document
body without its id.
"""

from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class StoredDocument(models.Model):
    collection = models.CharField(max_length=255, db_index=True)
    doc_id = models.CharField(max_length=64)
    data = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tailorbook_documents"
        constraints = [
            models.UniqueConstraint(
                fields=("collection", "doc_id"),
                name="uq_doc_collection_id",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.collection}/{self.doc_id}"
