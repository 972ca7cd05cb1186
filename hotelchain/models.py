"""Domain models shared by the session, notification and record layers."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional


class Role(str, enum.Enum):
    """Operator role governing which console pages and actions are permitted."""

    OWNER = "owner"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"


class Severity(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Identity:
    """Represents an authenticated operator of the console."""

    id: str
    email: str
    display_name: str
    role: Role
    assigned_hotel_id: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role.value,
            "assigned_hotel_id": self.assigned_hotel_id,
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "Identity":
        """Create an :class:`Identity` from raw dictionary data."""
        required_fields = {"id", "email", "display_name", "role"}
        missing = required_fields - data.keys()
        if missing:
            raise KeyError(f"Missing identity fields: {', '.join(sorted(missing))}")

        hotel = data.get("assigned_hotel_id")
        return Identity(
            id=str(data["id"]),
            email=str(data["email"]),
            display_name=str(data["display_name"]),
            role=Role(data["role"]),
            assigned_hotel_id=str(hotel) if hotel is not None else None,
        )


@dataclass(frozen=True)
class Session:
    """An authenticated identity paired with its opaque access token."""

    identity: Identity
    token: str

    def to_dict(self) -> Dict[str, object]:
        return {"identity": self.identity.to_dict(), "token": self.token}

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "Session":
        identity = data["identity"]
        token = data["token"]
        if not isinstance(identity, dict) or not isinstance(token, str):
            raise TypeError("Session payload has an unexpected shape")
        return Session(identity=Identity.from_dict(identity), token=token)


@dataclass
class Notification:
    """A transient, user-facing message shown in the notification centre."""

    id: str
    title: str
    message: str
    severity: Severity
    created_at_ms: int
    read: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "severity": self.severity.value,
            "created_at_ms": self.created_at_ms,
            "read": self.read,
        }


__all__ = ["Identity", "Notification", "Role", "Session", "Severity"]
