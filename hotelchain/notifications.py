"""In-memory notification centre for the admin console."""
from __future__ import annotations

import threading
import time
import uuid
from dataclasses import replace
from typing import List, Optional

from .models import Notification, Severity


def _now_ms() -> int:
    return int(time.time() * 1000)


class NotificationStore:
    """Newest-first log of transient operator messages.

    The log is unbounded unless ``max_entries`` is given, in which case the
    oldest entries are dropped once the limit is exceeded.
    """

    def __init__(self, *, max_entries: Optional[int] = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._items: List[Notification] = []
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> Optional[int]:
        return self._max_entries

    def add(self, notification: Notification) -> None:
        with self._lock:
            self._items.insert(0, notification)
            if self._max_entries is not None:
                del self._items[self._max_entries :]

    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> Notification:
        notification = Notification(
            id=uuid.uuid4().hex,
            title=title,
            message=message,
            severity=severity,
            created_at_ms=_now_ms(),
        )
        self.add(notification)
        return notification

    def mark_as_read(self, notification_id: str) -> None:
        with self._lock:
            self._items = [
                replace(item, read=True) if item.id == notification_id else item
                for item in self._items
            ]

    def clear(self) -> None:
        with self._lock:
            self._items = []

    def notifications(self) -> List[Notification]:
        with self._lock:
            return [replace(item) for item in self._items]

    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for item in self._items if not item.read)


__all__ = ["NotificationStore"]
