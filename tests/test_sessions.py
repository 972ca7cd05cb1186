from __future__ import annotations

import sqlite3
from pathlib import Path

import anyio
import pytest

from hotelchain.models import Identity, Role, Session
from hotelchain.sessions import SessionState, SessionStore
from hotelchain.storage import LocalStorage, MemoryStorage, SessionCipher, SessionPersistence


def _store(storage=None) -> SessionStore:
    return SessionStore(SessionPersistence(storage or MemoryStorage()))


def test_login_then_current_session_returns_same_pair(manager: Identity) -> None:
    store = _store()
    store.login(manager, "token-123")

    assert store.current_session() == Session(identity=manager, token="token-123")
    assert store.current_role() is Role.MANAGER


def test_login_replaces_previous_session(manager: Identity) -> None:
    owner = Identity(id="1", email="owner@example.com", display_name="John Owner", role=Role.OWNER)
    store = _store()
    store.login(manager, "first")
    store.login(owner, "second")

    assert store.current_session() == Session(identity=owner, token="second")


def test_logout_twice_is_harmless(manager: Identity) -> None:
    store = _store()
    store.login(manager, "token")

    store.logout()
    assert store.current_session() is None
    store.logout()
    assert store.current_session() is None


def test_state_is_unknown_until_restored(manager: Identity) -> None:
    store = _store()
    assert store.state is SessionState.UNKNOWN

    anyio.run(store.restore)
    assert store.state is SessionState.ANONYMOUS

    store.login(manager, "token")
    assert store.state is SessionState.AUTHENTICATED


def test_restore_loads_persisted_session(tmp_path: Path, manager: Identity) -> None:
    path = tmp_path / "console.sqlite3"
    first = _store(LocalStorage(path))
    first.login(manager, "persisted")

    second = _store(LocalStorage(path))
    restored = anyio.run(second.restore)

    assert restored == Session(identity=manager, token="persisted")
    assert second.current_session() == restored


def test_logout_prevents_resurrection(tmp_path: Path, manager: Identity) -> None:
    path = tmp_path / "console.sqlite3"
    first = _store(LocalStorage(path))
    first.login(manager, "persisted")
    first.logout()

    second = _store(LocalStorage(path))
    assert anyio.run(second.restore) is None
    assert second.state is SessionState.ANONYMOUS


def test_restore_runs_once(manager: Identity) -> None:
    storage = MemoryStorage()
    store = _store(storage)
    anyio.run(store.restore)

    SessionPersistence(storage).save(Session(identity=manager, token="late"))

    assert anyio.run(store.restore) is None
    assert store.current_session() is None


def test_login_before_restore_wins(manager: Identity) -> None:
    storage = MemoryStorage()
    other = Identity(id="9", email="old@example.com", display_name="Old", role=Role.OWNER)
    SessionPersistence(storage).save(Session(identity=other, token="stale"))

    store = _store(storage)
    store.login(manager, "fresh")
    anyio.run(store.restore)

    assert store.current_session() == Session(identity=manager, token="fresh")


def test_corrupted_persisted_session_restores_as_logged_out(manager: Identity) -> None:
    storage = MemoryStorage()
    SessionPersistence(storage, SessionCipher("another-build")).save(Session(identity=manager, token="x"))

    store = _store(storage)
    assert anyio.run(store.restore) is None
    assert store.state is SessionState.ANONYMOUS


class _LockedStorage(MemoryStorage):
    """Storage whose selected operations fail like a locked SQLite file."""

    def __init__(self, *, failing: set) -> None:
        super().__init__()
        self.failing = failing

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failing:
            raise sqlite3.OperationalError("database is locked")

    def get_item(self, key: str):
        self._maybe_fail("get")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._maybe_fail("set")
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        self._maybe_fail("remove")
        super().remove_item(key)


def test_unreadable_storage_restores_as_logged_out() -> None:
    store = _store(_LockedStorage(failing={"get"}))

    assert anyio.run(store.restore) is None
    assert store.state is SessionState.ANONYMOUS


def test_logout_overwrites_slot_when_removal_fails(manager: Identity) -> None:
    storage = _LockedStorage(failing=set())
    store = _store(storage)
    store.login(manager, "t")

    storage.failing = {"remove"}
    store.logout()

    assert store.current_session() is None
    storage.failing = set()
    assert anyio.run(_store(storage).restore) is None


def test_logout_does_not_raise_when_storage_is_unwritable(manager: Identity) -> None:
    storage = _LockedStorage(failing=set())
    store = _store(storage)
    store.login(manager, "t")

    storage.failing = {"remove", "set"}
    store.logout()

    assert store.current_session() is None


def test_failed_save_leaves_no_session(manager: Identity) -> None:
    storage = _LockedStorage(failing={"set"})
    store = _store(storage)

    with pytest.raises(sqlite3.OperationalError):
        store.login(manager, "t")

    assert store.current_session() is None
