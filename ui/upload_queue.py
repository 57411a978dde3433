"""Sequential upload queue for the Documents page.

Uploads go through a single-worker executor, so a new upload never starts
before the previous network call has finished. Each executor job takes
whatever item is at the front of the pending order when it runs; a retried
item is pushed to the front.
"""

import logging
import threading
import uuid
from collections import deque
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from ui.helpers import UploadResult
from ui.notifications import NotificationCenter, ToastKind

logger = logging.getLogger(__name__)

UNEXPECTED_UPLOAD_ERROR = "Unexpected error while uploading"


class UploadStatus(str, Enum):
    """Lifecycle of a queued upload."""

    QUEUED = "queued"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


STATUS_LABELS = {
    UploadStatus.QUEUED: "Queued",
    UploadStatus.UPLOADING: "Uploading",
    UploadStatus.COMPLETED: "Uploaded",
    UploadStatus.ERROR: "Error",
}

STATUS_NOTES = {
    UploadStatus.QUEUED: "Queued and waiting",
    UploadStatus.UPLOADING: "Streaming securely",
    UploadStatus.COMPLETED: "Ready for chat",
    UploadStatus.ERROR: "Needs attention",
}

# Percent shown on the progress bar; uploads do not report byte progress.
STATUS_PROGRESS = {
    UploadStatus.QUEUED: 20,
    UploadStatus.UPLOADING: 65,
    UploadStatus.COMPLETED: 100,
    UploadStatus.ERROR: 100,
}


class PendingFile(NamedTuple):
    """File picked by the user, not yet queued."""

    name: str
    data: bytes
    content_type: str | None = None


@dataclass
class UploadQueueItem:
    """One file in the upload queue."""

    id: str
    file_name: str
    data: bytes
    content_type: str | None
    size: int
    status: UploadStatus = UploadStatus.QUEUED
    message: str | None = None


UploadFn = Callable[[str, bytes, str | None], UploadResult]


class UploadQueue:
    """Upload queue drained by a bounded worker of capacity 1."""

    def __init__(
        self,
        upload: UploadFn,
        notifications: NotificationCenter | None = None,
        on_uploaded: Callable[[], None] | None = None,
    ) -> None:
        """Initialize queue.

        Args:
            upload: Performs one upload and reports the outcome
            notifications: Receives a toast per finished upload
            on_uploaded: Called after each successful upload
        """
        self._upload = upload
        self.notifications = notifications or NotificationCenter()
        self._on_uploaded = on_uploaded
        self._lock = threading.Lock()
        self._items: list[UploadQueueItem] = []
        self._pending: deque[str] = deque()
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="upload-worker")
        self._futures: list[Future[None]] = []
        self.uploads_completed = 0

    @property
    def items(self) -> list[UploadQueueItem]:
        with self._lock:
            return list(self._items)

    @property
    def is_processing(self) -> bool:
        with self._lock:
            return any(item.status is UploadStatus.UPLOADING for item in self._items)

    def add_files(self, files: Iterable[PendingFile]) -> list[UploadQueueItem]:
        """Queue files in the given order and schedule them."""
        added: list[UploadQueueItem] = []
        with self._lock:
            for file in files:
                item = UploadQueueItem(
                    id=uuid.uuid4().hex,
                    file_name=file.name,
                    data=file.data,
                    content_type=file.content_type,
                    size=len(file.data),
                )
                self._items.append(item)
                self._pending.append(item.id)
                added.append(item)

        for _ in added:
            self._schedule()
        return added

    def retry(self, item_id: str) -> bool:
        """Re-queue a failed item ahead of other pending items.

        Returns:
            False if the item is unknown or not in the error state
        """
        with self._lock:
            item = self._find(item_id)
            if item is None or item.status is not UploadStatus.ERROR:
                return False
            item.status = UploadStatus.QUEUED
            item.message = None
            self._pending.appendleft(item.id)

        self._schedule()
        return True

    def wait_idle(self, timeout: float | None = None) -> None:
        """Block until every scheduled upload has finished."""
        with self._lock:
            futures = list(self._futures)
        wait(futures, timeout=timeout)

    def shutdown(self) -> None:
        self._worker.shutdown(wait=True)

    def _schedule(self) -> None:
        future = self._worker.submit(self._process_next)
        with self._lock:
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(future)

    def _find(self, item_id: str) -> UploadQueueItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def _process_next(self) -> None:
        with self._lock:
            if not self._pending:
                return
            item = self._find(self._pending.popleft())
            if item is None or item.status is not UploadStatus.QUEUED:
                return
            item.status = UploadStatus.UPLOADING

        try:
            result = self._upload(item.file_name, item.data, item.content_type)
        except Exception:
            logger.exception(f"Unhandled upload error for {item.file_name}")
            result = UploadResult(
                success=False, file_name=item.file_name, message=UNEXPECTED_UPLOAD_ERROR
            )

        with self._lock:
            if result.success:
                item.status = UploadStatus.COMPLETED
                item.message = "Uploaded"
                self.uploads_completed += 1
            else:
                item.status = UploadStatus.ERROR
                item.message = result.message or "Upload failed"

        if result.success:
            self.notifications.push(
                ToastKind.SUCCESS,
                f"{item.file_name} uploaded",
                "You can find it under Uploaded documents.",
            )
            if self._on_uploaded is not None:
                self._on_uploaded()
        else:
            self.notifications.push(ToastKind.ERROR, f"{item.file_name} failed", item.message)
