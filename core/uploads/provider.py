"""
Tailorbook Uploads — Uploader Protocol and In-Memory Uploader
===============================================================
Design photos are handed to an opaque blob uploader:

    upload(file, destination) → progress events (0–100) ending in
                                 a download URL or a failure

The size limit is checked before any transfer starts. Progress is
tracked per item; a failed upload leaves the failure marker (-1) in
place so the caller can offer a retry. There is no automatic retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Protocol

from core.time.clock import Clock, epoch_millis

logger = logging.getLogger("tailorbook.uploads")

FAILED_MARKER = -1


class UploadRejected(ValueError):
    """The file was refused before the transfer started."""


@dataclass(frozen=True)
class UploadFile:
    filename: str
    content: bytes
    content_type: str = ""

    def __post_init__(self):
        if not self.filename or not isinstance(self.filename, str):
            raise ValueError("filename must be a non-empty string.")

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadEvent:
    """
    One progress report. The final event carries either ``url``
    or ``failed=True`` with an error message.
    """

    percent: float
    url: Optional[str] = None
    failed: bool = False
    error: str = ""

    @property
    def is_final(self) -> bool:
        return self.failed or self.url is not None


class Uploader(Protocol):
    def upload(self, file: UploadFile, destination: str) -> Iterator[UploadEvent]:
        ...


def design_photo_path(
    order_identifier: str, item_id: str, filename: str, clock: Clock,
) -> str:
    """orderDesigns/<order>/<item>-<epoch ms>-<filename>; unsaved orders use 'newOrder'."""
    if not item_id:
        raise UploadRejected("Item id missing for upload.")
    folder = order_identifier or "newOrder"
    millis = epoch_millis(clock.now_utc())
    return f"orderDesigns/{folder}/{item_id}-{millis}-{filename}"


def check_upload_size(file: UploadFile, max_bytes: int) -> None:
    if file.size > max_bytes:
        raise UploadRejected(
            f"File '{file.filename}' is too large "
            f"({file.size} bytes, max {max_bytes})."
        )


class UploadTracker:
    """Per-item progress map: 0–100 while running, -1 after a failure."""

    def __init__(self, uploader: Uploader, max_bytes: int):
        self._uploader = uploader
        self._max_bytes = max_bytes
        self.progress: Dict[str, float] = {}

    def run(
        self,
        item_id: str,
        file: UploadFile,
        destination: str,
        on_progress: Optional[Callable[[str, float], None]] = None,
    ) -> Optional[str]:
        """
        Upload one file for one item.

        Returns the download URL, or None when the transfer failed.
        Raises UploadRejected (nothing transferred) for oversize files.
        """
        check_upload_size(file, self._max_bytes)
        self.progress[item_id] = 0
        for event in self._uploader.upload(file, destination):
            if event.failed:
                self.progress[item_id] = FAILED_MARKER
                logger.error(f"Upload failed for item {item_id} ({destination}): {event.error}")
                return None
            self.progress[item_id] = min(100.0, max(0.0, float(event.percent)))
            if on_progress is not None:
                on_progress(item_id, self.progress[item_id])
            if event.url is not None:
                self.progress[item_id] = 100
                logger.info(f"Upload complete for item {item_id}: {destination}")
                return event.url
        self.progress[item_id] = FAILED_MARKER
        logger.error(f"Upload for item {item_id} ended without a download URL.")
        return None

    def has_failed(self, item_id: str) -> bool:
        return self.progress.get(item_id) == FAILED_MARKER


class InMemoryUploader:
    """
    Deterministic uploader for tests/bootstrap.
    Emits 0, 50 and 100 percent, then the URL.
    """

    def __init__(self, base_url: str = "memory://uploads"):
        self._base_url = base_url.rstrip("/")
        self.blobs: Dict[str, bytes] = {}
        self._fail_next: Optional[str] = None

    def fail_next(self, error: str = "storage/unknown") -> None:
        self._fail_next = error

    def upload(self, file: UploadFile, destination: str) -> Iterator[UploadEvent]:
        yield UploadEvent(percent=0)
        if self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
            yield UploadEvent(percent=0, failed=True, error=error)
            return
        yield UploadEvent(percent=50)
        self.blobs[destination] = file.content
        yield UploadEvent(percent=100, url=f"{self._base_url}/{destination}")
