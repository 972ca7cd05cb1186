from __future__ import annotations

import pytest

from hotelchain.database import DEMO_PASSWORD, Database
from hotelchain.models import Role


def test_create_and_authenticate_account(database: Database) -> None:
    identity = database.create_account(
        " Manager@Example.com ", "Jane Manager", "Sup3rSecret", Role.MANAGER, "1"
    )

    assert identity.email == "manager@example.com"
    assert identity.assigned_hotel_id == "1"

    authenticated = database.authenticate("manager@example.com", "Sup3rSecret")
    assert authenticated == identity

    assert database.authenticate("manager@example.com", "wrong-password") is None
    assert database.authenticate("nobody@example.com", "Sup3rSecret") is None


def test_account_validation(database: Database) -> None:
    with pytest.raises(ValueError):
        database.create_account("a@example.com", "A", "short", Role.OWNER)
    with pytest.raises(ValueError):
        database.create_account("a@example.com", "A", "long-enough", "janitor")
    with pytest.raises(ValueError):
        database.create_account("a@example.com", "  ", "long-enough", Role.OWNER)

    database.create_account("a@example.com", "A", "long-enough", "owner")
    with pytest.raises(ValueError):
        database.create_account("A@example.com", "Again", "long-enough", Role.OWNER)


def test_seed_demo_accounts_is_idempotent(database: Database) -> None:
    created = database.seed_demo_accounts()
    assert {identity.role for identity in created} == set(Role)
    assert database.seed_demo_accounts() == []

    manager = database.authenticate("manager@example.com", DEMO_PASSWORD)
    assert manager is not None
    assert manager.id == "2"
    assert manager.assigned_hotel_id == "1"
    assert len(database.list_accounts()) == 3


def test_insert_and_select_customers(database: Database) -> None:
    first = database.insert("customers", {"name": "Ada", "email": "ada@example.com"})
    second = database.insert("customers", {"name": "Grace", "phone": "555-0100"})
    assert first.ok and second.ok
    assert first.data["id"] != second.data["id"]
    assert first.data["address"] == ""

    newest_first = database.select("customers", order_by="created_at", descending=True)
    assert [row["name"] for row in newest_first.data] == ["Grace", "Ada"]

    filtered = database.select("customers", {"name": "Ada"})
    assert [row["id"] for row in filtered.data] == [first.data["id"]]

    by_id = database.select_by_id("customers", second.data["id"])
    assert by_id.data["phone"] == "555-0100"


def test_record_errors_are_returned_not_raised(database: Database) -> None:
    assert database.insert("invoices", {"name": "x"}).error is not None
    assert database.insert("customers", {"nickname": "x"}).error is not None
    assert database.select("customers", {"nickname": "x"}).error is not None
    assert database.select("customers", order_by="nickname").error is not None
    assert not database.select_by_id("customers", "missing").ok

    orphan = database.insert(
        "bookings",
        {"customer_id": "missing", "hotel_id": "1", "check_in_date": "2024-05-01"},
    )
    assert not orphan.ok

    incomplete = database.insert("customers", {"email": "no-name@example.com"})
    assert not incomplete.ok
