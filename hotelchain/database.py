"""SQLite-backed persistence for operator accounts, customers and bookings."""
from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from passlib.context import CryptContext

from .config import resolve_database_path
from .models import Identity, Role

logger = logging.getLogger("hotelchain.database")

PASSWORD_MIN_LENGTH = 6

DEMO_PASSWORD = "password"

DEMO_ACCOUNTS = (
    {"id": "1", "email": "owner@example.com", "display_name": "John Owner", "role": Role.OWNER},
    {
        "id": "2",
        "email": "manager@example.com",
        "display_name": "Jane Manager",
        "role": Role.MANAGER,
        "assigned_hotel_id": "1",
    },
    {"id": "3", "email": "accountant@example.com", "display_name": "Bob Accountant", "role": Role.ACCOUNTANT},
)

# Columns callers may filter, order or insert on, per collection.
COLLECTIONS: Dict[str, frozenset] = {
    "customers": frozenset({"id", "name", "email", "phone", "address", "created_at"}),
    "bookings": frozenset(
        {
            "id",
            "customer_id",
            "hotel_id",
            "room_number",
            "check_in_date",
            "check_out_date",
            "room_charges",
            "laundry_charges",
            "room_service_charges",
            "other_charges",
            "total_amount",
            "status",
            "notes",
            "created_at",
        }
    ),
}

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def _verify_password(password: str, hashed: str) -> bool:
    try:
        return _pwd_context.verify(password, hashed)
    except ValueError:
        return False


@dataclass(frozen=True)
class Account:
    """An operator account as listed by the admin tooling."""

    identity: Identity
    created_at: datetime


@dataclass(frozen=True)
class RecordResult:
    """Outcome of a record-store call: ``data`` on success, ``error`` otherwise."""

    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Database:
    """Simple wrapper around SQLite for accounts and the customer/booking records."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS accounts (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    display_name TEXT NOT NULL,
                    role TEXT NOT NULL,
                    assigned_hotel_id TEXT,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS customers (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL DEFAULT '',
                    phone TEXT NOT NULL DEFAULT '',
                    address TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS bookings (
                    id TEXT PRIMARY KEY,
                    customer_id TEXT NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
                    hotel_id TEXT NOT NULL,
                    room_number TEXT,
                    check_in_date TEXT NOT NULL,
                    check_out_date TEXT,
                    room_charges REAL NOT NULL DEFAULT 0,
                    laundry_charges REAL NOT NULL DEFAULT 0,
                    room_service_charges REAL NOT NULL DEFAULT 0,
                    other_charges REAL NOT NULL DEFAULT 0,
                    total_amount REAL NOT NULL DEFAULT 0,
                    status TEXT NOT NULL DEFAULT 'active',
                    notes TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_bookings_customer_id ON bookings(customer_id);
                """
            )

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------
    def create_account(
        self,
        email: str,
        display_name: str,
        password: str,
        role: Role | str,
        assigned_hotel_id: Optional[str] = None,
        *,
        account_id: Optional[str] = None,
    ) -> Identity:
        """Create a new operator account and return its identity."""

        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        normalized_email = email.strip().lower()
        if not normalized_email:
            raise ValueError("Email must not be empty")
        name = display_name.strip()
        if not name:
            raise ValueError("Display name must not be empty")
        try:
            resolved_role = Role(role)
        except ValueError as exc:
            raise ValueError(f"Unknown role '{role}'") from exc

        identity = Identity(
            id=account_id or uuid.uuid4().hex,
            email=normalized_email,
            display_name=name,
            role=resolved_role,
            assigned_hotel_id=assigned_hotel_id or None,
        )

        with self._connect() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO accounts (
                        id,
                        email,
                        display_name,
                        role,
                        assigned_hotel_id,
                        password_hash,
                        created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        identity.id,
                        identity.email,
                        identity.display_name,
                        identity.role.value,
                        identity.assigned_hotel_id,
                        _hash_password(password),
                        _serialize_datetime(_current_timestamp()),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise ValueError("An account with that email already exists") from exc

        return identity

    def get_account_by_email(self, email: str) -> Optional[Identity]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_identity(row)

    def authenticate(self, email: str, password: str) -> Optional[Identity]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        if row is None:
            return None
        if not _verify_password(password, str(row["password_hash"])):
            return None
        return self._row_to_identity(row)

    def list_accounts(self) -> List[Account]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM accounts ORDER BY created_at, email").fetchall()
        return [
            Account(identity=self._row_to_identity(row), created_at=datetime.fromisoformat(str(row["created_at"])))
            for row in rows
        ]

    def seed_demo_accounts(self) -> List[Identity]:
        """Create the demo owner, manager and accountant accounts if missing."""

        created: List[Identity] = []
        for entry in DEMO_ACCOUNTS:
            if self.get_account_by_email(str(entry["email"])) is not None:
                continue
            identity = self.create_account(
                str(entry["email"]),
                str(entry["display_name"]),
                DEMO_PASSWORD,
                entry["role"],
                entry.get("assigned_hotel_id"),
                account_id=str(entry["id"]),
            )
            logger.info("Seeded demo account %s", identity.email)
            created.append(identity)
        return created

    # ------------------------------------------------------------------
    # Record store
    # ------------------------------------------------------------------
    def insert(self, collection: str, record: Mapping[str, Any]) -> RecordResult:
        columns = COLLECTIONS.get(collection)
        if columns is None:
            return RecordResult(error=f"Unknown collection '{collection}'")
        unknown = set(record) - columns
        if unknown:
            return RecordResult(error=f"Unknown fields for {collection}: {', '.join(sorted(unknown))}")

        values = dict(record)
        values["id"] = uuid.uuid4().hex
        values["created_at"] = _serialize_datetime(_current_timestamp())
        names = sorted(values)
        placeholders = ", ".join("?" for _ in names)

        try:
            with self._connect() as conn:
                conn.execute(
                    f"INSERT INTO {collection} ({', '.join(names)}) VALUES ({placeholders})",
                    [values[name] for name in names],
                )
                row = conn.execute(f"SELECT * FROM {collection} WHERE id = ?", (values["id"],)).fetchone()
        except sqlite3.Error as exc:
            logger.warning("Insert into %s failed: %s", collection, exc)
            return RecordResult(error=str(exc))
        return RecordResult(data=dict(row))

    def select(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> RecordResult:
        columns = COLLECTIONS.get(collection)
        if columns is None:
            return RecordResult(error=f"Unknown collection '{collection}'")
        filters = dict(filters or {})
        unknown = set(filters) - columns
        if order_by is not None and order_by not in columns:
            unknown.add(order_by)
        if unknown:
            return RecordResult(error=f"Unknown fields for {collection}: {', '.join(sorted(unknown))}")

        query = f"SELECT * FROM {collection}"
        params: List[Any] = []
        if filters:
            clauses = []
            for name in sorted(filters):
                clauses.append(f"{name} = ?")
                params.append(filters[name])
            query += " WHERE " + " AND ".join(clauses)
        if order_by is not None:
            direction = "DESC" if descending else "ASC"
            query += f" ORDER BY {order_by} {direction}, rowid {direction}"

        try:
            with self._connect() as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            logger.warning("Select from %s failed: %s", collection, exc)
            return RecordResult(error=str(exc))
        return RecordResult(data=[dict(row) for row in rows])

    def select_by_id(self, collection: str, record_id: str) -> RecordResult:
        result = self.select(collection, {"id": record_id})
        if not result.ok:
            return result
        if not result.data:
            return RecordResult(error=f"{collection} record '{record_id}' not found")
        return RecordResult(data=result.data[0])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_identity(self, row: sqlite3.Row) -> Identity:
        return Identity(
            id=str(row["id"]),
            email=str(row["email"]),
            display_name=str(row["display_name"]),
            role=Role(row["role"]),
            assigned_hotel_id=row["assigned_hotel_id"],
        )


__all__ = ["Account", "COLLECTIONS", "Database", "RecordResult", "resolve_database_path"]
