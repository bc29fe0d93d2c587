"""
Transient Notifications

Success and error toasts shown after a user action. Only the latest one
is kept, and it disappears after a fixed time.

Expiry is checked when the notification is read, so no timer or
background task is involved.
"""

import time
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    kind: NotificationKind
    message: str
    created_at: float

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return now - self.created_at >= ttl_seconds


class NotificationCenter:
    """Holds the latest notification until it expires or is dismissed."""

    def __init__(
        self,
        ttl_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._latest: Optional[Notification] = None

    def _push(self, kind: NotificationKind, message: str) -> Notification:
        self._latest = Notification(kind=kind, message=message, created_at=self._clock())
        return self._latest

    def success(self, message: str) -> Notification:
        return self._push(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._push(NotificationKind.ERROR, message)

    @property
    def current(self) -> Optional[Notification]:
        """The live notification, or None once it has expired."""
        if self._latest is not None and self._latest.is_expired(self._clock(), self._ttl_seconds):
            self._latest = None
        return self._latest

    def dismiss(self) -> None:
        self._latest = None
