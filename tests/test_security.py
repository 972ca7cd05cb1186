from __future__ import annotations

from typing import Optional, Set

import anyio
import pytest

from hotelchain.models import Identity, Role
from hotelchain.security import GuardDecision, guard, is_authorized, resolve_page
from hotelchain.sessions import SessionStore
from hotelchain.storage import MemoryStorage, SessionPersistence

ALLOWED_SETS = {
    "empty": frozenset(),
    "manager": frozenset({Role.MANAGER}),
    "owner_accountant": frozenset({Role.OWNER, Role.ACCOUNTANT}),
}

EXPECTED = {
    ("empty", Role.OWNER): False,
    ("empty", Role.MANAGER): False,
    ("empty", Role.ACCOUNTANT): False,
    ("manager", Role.OWNER): False,
    ("manager", Role.MANAGER): True,
    ("manager", Role.ACCOUNTANT): False,
    ("owner_accountant", Role.OWNER): True,
    ("owner_accountant", Role.MANAGER): False,
    ("owner_accountant", Role.ACCOUNTANT): True,
}


@pytest.mark.parametrize("allowed_name, role", sorted(EXPECTED, key=lambda item: (item[0], item[1].value)))
def test_membership_table(allowed_name: str, role: Role) -> None:
    assert is_authorized(ALLOWED_SETS[allowed_name], role) is EXPECTED[(allowed_name, role)]


@pytest.mark.parametrize("role", list(Role))
def test_unspecified_roles_admit_any_signed_in_role(role: Role) -> None:
    assert is_authorized(None, role) is True


@pytest.mark.parametrize("allowed", [None, frozenset({Role.MANAGER}), frozenset()])
def test_missing_role_is_never_authorized(allowed: Optional[Set[Role]]) -> None:
    assert is_authorized(allowed, None) is False


def _restored_store() -> SessionStore:
    store = SessionStore(SessionPersistence(MemoryStorage()))
    anyio.run(store.restore)
    return store


def test_guard_is_pending_before_restore() -> None:
    store = SessionStore(SessionPersistence(MemoryStorage()))
    assert guard(store) is GuardDecision.PENDING


def test_guard_requires_login_without_session() -> None:
    assert guard(_restored_store(), frozenset({Role.OWNER})) is GuardDecision.LOGIN


def test_manager_is_sent_to_unauthorized_for_owner_pages(manager: Identity) -> None:
    store = _restored_store()
    store.login(manager, "token")

    assert is_authorized(frozenset({Role.OWNER}), store.current_role()) is False
    assert guard(store, frozenset({Role.OWNER})) is GuardDecision.UNAUTHORIZED
    assert guard(store) is GuardDecision.ALLOW


def test_unknown_page_falls_back_to_dashboard() -> None:
    assert resolve_page("reports") == "reports"
    assert resolve_page("nonsense") == "dashboard"
