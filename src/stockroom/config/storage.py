"""Location and options of the SQLAlchemy store's database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import choice_env_var, optional_env_var

APP_DIR_NAME: Final[str] = "stockroom"
DEFAULT_DB_FILENAME: Final[str] = "stockroom.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def default_data_dir() -> Path:
    """Per-user data directory (``XDG_DATA_HOME`` or ``LOCALAPPDATA``)."""

    if os.name == "nt":
        base = optional_env_var("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    else:
        base = optional_env_var("XDG_DATA_HOME")
        root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def data_dir() -> Path:
    configured = optional_env_var("STOCKROOM_DATA_DIR")
    directory = Path(configured) if configured else default_data_dir()
    return directory.expanduser().resolve()


def sqlite_uri(directory: Path) -> str:
    """URI of the default SQLite file under ``directory``, creating the directory."""

    directory.mkdir(parents=True, exist_ok=True)
    return f"sqlite+pysqlite:///{directory / DEFAULT_DB_FILENAME}"


def get_database_config() -> DatabaseConfig:
    uri = optional_env_var("DATABASE_URI") or sqlite_uri(data_dir())
    echo = choice_env_var("STOCKROOM_DB_ECHO", ("false", "true"), default="false")
    return DatabaseConfig(uri=uri, echo=echo == "true")
