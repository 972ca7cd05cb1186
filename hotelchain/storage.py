"""Durable local key-value storage and the encrypted session record.

The session is serialized to canonical JSON and encrypted with Fernet before
it is written to a storage slot. The default key is embedded in the
distributed code, so the encryption only obfuscates the record on disk; it is
not an access-control boundary. Deployments that need real protection must
supply their own secret through ``HOTELCHAIN_SESSION_KEY``.
"""
from __future__ import annotations

import base64
import hashlib
import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol

from cryptography.fernet import Fernet, InvalidToken

from .models import Session

logger = logging.getLogger("hotelchain.storage")

SESSION_STORAGE_KEY = "auth-storage"

# Shipped with the code; see the module docstring.
EMBEDDED_SESSION_KEY = "hotelchain-console-session-key"

# Written in place of the session when the slot cannot be deleted; reads as no session.
LOGGED_OUT_MARKER = ""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage slots, lost when the process exits."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


class LocalStorage:
    """SQLite-backed storage slots that survive restarts."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._path = path
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS local_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def get_item(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM local_storage WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        updated_at = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO local_storage (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, updated_at),
            )

    def remove_item(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))


class SessionCipher:
    """Encrypt and decrypt the serialized session record."""

    def __init__(self, secret: Optional[str] = None) -> None:
        self._fernet = self._build_cipher(secret or EMBEDDED_SESSION_KEY)

    @staticmethod
    def _build_cipher(secret: str) -> Fernet:
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        key = base64.urlsafe_b64encode(digest)
        return Fernet(key)

    def encrypt(self, session: Session) -> str:
        payload = json.dumps(session.to_dict(), sort_keys=True, separators=(",", ":"))
        token = self._fernet.encrypt(payload.encode("utf-8"))
        return token.decode("utf-8")

    def decrypt(self, encrypted: str) -> Optional[Session]:
        """Return the stored session, or ``None`` when it cannot be recovered."""

        try:
            plaintext = self._fernet.decrypt(encrypted.encode("utf-8"))
        except (InvalidToken, UnicodeEncodeError):
            logger.warning("Persisted session could not be decrypted; treating as logged out")
            return None

        try:
            data = json.loads(plaintext.decode("utf-8"))
            if not isinstance(data, dict):
                raise TypeError("Session payload must be an object")
            return Session.from_dict(data)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Persisted session could not be parsed (%s); treating as logged out", exc)
            return None


class SessionPersistence:
    """Read and write the encrypted session under its well-known storage key."""

    def __init__(
        self,
        storage: KeyValueStorage,
        cipher: Optional[SessionCipher] = None,
        *,
        key: str = SESSION_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._cipher = cipher or SessionCipher()
        self._key = key

    def save(self, session: Session) -> None:
        self._storage.set_item(self._key, self._cipher.encrypt(session))

    def load(self) -> Optional[Session]:
        try:
            encrypted = self._storage.get_item(self._key)
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Persisted session could not be read (%s); treating as logged out", exc)
            return None
        if not encrypted:
            return None
        return self._cipher.decrypt(encrypted)

    def clear(self) -> bool:
        """Invalidate the stored session; returns ``False`` if it may still be readable."""

        try:
            self._storage.remove_item(self._key)
            return True
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Persisted session could not be removed (%s); overwriting it", exc)

        try:
            self._storage.set_item(self._key, LOGGED_OUT_MARKER)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Persisted session could not be invalidated: %s", exc)
            return False
        return True


__all__ = [
    "EMBEDDED_SESSION_KEY",
    "KeyValueStorage",
    "LOGGED_OUT_MARKER",
    "LocalStorage",
    "MemoryStorage",
    "SESSION_STORAGE_KEY",
    "SessionCipher",
    "SessionPersistence",
]
