"""Configuration management for the hotel-chain admin console."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the console process."""

    database_path: Path
    session_key: Optional[str] = None
    notification_limit: Optional[int] = None

    @staticmethod
    def from_dict(data: Dict[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""
        raw_db = data.get("database_path")
        if raw_db:
            candidate = Path(str(raw_db)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        raw_limit = data.get("notification_limit")
        limit = int(raw_limit) if raw_limit is not None else None
        if limit is not None and limit <= 0:
            raise ValueError("notification_limit must be a positive integer")

        key = data.get("session_key")
        return Settings(
            database_path=database_path,
            session_key=str(key) if key else None,
            notification_limit=limit,
        )


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the console database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "hotelchain.sqlite3").resolve(strict=False)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "hotelchain.yaml").resolve(strict=False)
    return candidate


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from the YAML file (when present) and apply env overrides."""

    if config_path is None:
        config_path = resolve_config_path(os.getenv("HOTELCHAIN_CONFIG"))

    raw: Dict[str, object] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        raw.update(loaded)

    db_env = os.getenv("HOTELCHAIN_DB_PATH")
    if db_env:
        raw["database_path"] = db_env
    key_env = os.getenv("HOTELCHAIN_SESSION_KEY")
    if key_env:
        raw["session_key"] = key_env
    limit_env = os.getenv("HOTELCHAIN_NOTIFICATION_LIMIT")
    if limit_env:
        raw["notification_limit"] = limit_env

    return Settings.from_dict(raw, base_path=config_path.parent)


__all__ = ["Settings", "load_settings", "resolve_config_path", "resolve_database_path"]
