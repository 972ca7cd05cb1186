from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hotelchain.config import Settings
from hotelchain.database import Database
from hotelchain.models import Identity, Role


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(database_path=tmp_path / "hotelchain.sqlite3")


@pytest.fixture()
def database(settings: Settings) -> Database:
    db = Database(settings.database_path)
    db.initialize()
    return db


@pytest.fixture()
def manager() -> Identity:
    return Identity(
        id="2",
        email="manager@example.com",
        display_name="Jane Manager",
        role=Role.MANAGER,
        assigned_hotel_id="H1",
    )
