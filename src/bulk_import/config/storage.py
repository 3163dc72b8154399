"""Database location helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "bulk-import"
DEFAULT_DB_FILENAME: Final[str] = "bulk_import.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    if os.name == "nt":
        return Path(os.getenv("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    return Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")


def get_data_dir() -> Path:
    """Return ``BULK_IMPORT_DATA_DIR`` or the per-user data directory of the app."""

    configured = os.getenv("BULK_IMPORT_DATA_DIR")
    directory = Path(configured) if configured else _platform_data_home() / APP_DIR_NAME
    return directory.expanduser().resolve()


def get_database_config(*, data_dir: Path | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    directory = data_dir or get_data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{directory / DEFAULT_DB_FILENAME}")
