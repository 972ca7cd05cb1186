"""Core utilities for the hotel-chain admin console."""

from __future__ import annotations

from typing import Any

from .database import Database, RecordResult
from .config import resolve_database_path
from .notifications import NotificationStore
from .security import is_authorized
from .sessions import SessionStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the console application."""

    from .console import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "NotificationStore",
    "RecordResult",
    "SessionStore",
    "create_app",
    "is_authorized",
    "resolve_database_path",
]
