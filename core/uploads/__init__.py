"""
Tailorbook Uploads — Public API
=================================
"""

from core.uploads.provider import (
    FAILED_MARKER,
    InMemoryUploader,
    UploadEvent,
    UploadFile,
    Uploader,
    UploadRejected,
    UploadTracker,
    check_upload_size,
    design_photo_path,
)

__all__ = [
    "FAILED_MARKER",
    "InMemoryUploader",
    "UploadEvent",
    "UploadFile",
    "Uploader",
    "UploadRejected",
    "UploadTracker",
    "check_upload_size",
    "design_photo_path",
]
