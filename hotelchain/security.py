"""Role-based access checks for the console views."""
from __future__ import annotations

import enum
from typing import AbstractSet, Dict, Optional

from .models import Role
from .sessions import SessionState, SessionStore


class GuardDecision(str, enum.Enum):
    PENDING = "pending"
    LOGIN = "login"
    UNAUTHORIZED = "unauthorized"
    ALLOW = "allow"


# ``None`` admits any signed-in operator.
PAGE_ROLES: Dict[str, Optional[AbstractSet[Role]]] = {
    "dashboard": None,
    "hotels": None,
    "employees": frozenset({Role.OWNER, Role.MANAGER}),
    "customers": None,
    "expenses": frozenset({Role.OWNER, Role.ACCOUNTANT}),
    "reports": frozenset({Role.OWNER, Role.ACCOUNTANT}),
    "settings": frozenset({Role.OWNER}),
}

DEFAULT_PAGE = "dashboard"


def is_authorized(allowed_roles: Optional[AbstractSet[Role]], current_role: Optional[Role]) -> bool:
    if current_role is None:
        return False
    if allowed_roles is None:
        return True
    return current_role in allowed_roles


def guard(store: SessionStore, allowed_roles: Optional[AbstractSet[Role]] = None) -> GuardDecision:
    """Decide how a guarded view should respond for the current session."""

    if store.state is SessionState.UNKNOWN:
        return GuardDecision.PENDING
    role = store.current_role()
    if role is None:
        return GuardDecision.LOGIN
    if not is_authorized(allowed_roles, role):
        return GuardDecision.UNAUTHORIZED
    return GuardDecision.ALLOW


def resolve_page(page: str) -> str:
    return page if page in PAGE_ROLES else DEFAULT_PAGE


__all__ = ["DEFAULT_PAGE", "GuardDecision", "PAGE_ROLES", "guard", "is_authorized", "resolve_page"]
