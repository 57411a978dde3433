"""Transient toasts and the activity indicator for upload events."""

import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

TOAST_LIFETIME_SECONDS = 6.0
ACTIVITY_HISTORY_LIMIT = 20


class ToastKind(str, Enum):
    """Toast severity."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    """Single notification."""

    id: str
    kind: ToastKind
    title: str
    message: str | None
    created_at: float


class NotificationCenter:
    """Toasts that expire on their own plus an unread-activity flag.

    Safe to call from the upload worker thread.
    """

    def __init__(
        self,
        lifetime_seconds: float = TOAST_LIFETIME_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lifetime = lifetime_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._toasts: list[Toast] = []
        self._activity: list[Toast] = []
        self.has_activity_alert = False
        self.show_activity_overlay = False

    def push(self, kind: ToastKind, title: str, message: str | None = None) -> Toast:
        """Show a toast and flag new activity."""
        toast = Toast(
            id=uuid.uuid4().hex,
            kind=kind,
            title=title,
            message=message,
            created_at=self._clock(),
        )
        with self._lock:
            self._toasts.append(toast)
            self._activity = [toast, *self._activity][:ACTIVITY_HISTORY_LIMIT]
            self.has_activity_alert = True
        return toast

    def active_toasts(self) -> list[Toast]:
        """Return toasts still within their lifetime, dropping expired ones."""
        now = self._clock()
        with self._lock:
            self._toasts = [t for t in self._toasts if now - t.created_at < self._lifetime]
            return list(self._toasts)

    def dismiss(self, toast_id: str) -> None:
        with self._lock:
            self._toasts = [t for t in self._toasts if t.id != toast_id]

    @property
    def activity(self) -> list[Toast]:
        """Recent events, newest first."""
        with self._lock:
            return list(self._activity)

    def toggle_activity_overlay(self) -> None:
        """Open or close the activity panel; opening marks activity as seen."""
        self.show_activity_overlay = not self.show_activity_overlay
        if self.show_activity_overlay:
            self.has_activity_alert = False

    def close_activity_overlay(self) -> None:
        self.show_activity_overlay = False
