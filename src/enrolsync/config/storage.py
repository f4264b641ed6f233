"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "enrolsync"
SOURCE_DB_FILENAME: Final[str] = "source.db"
TARGET_DB_FILENAME: Final[str] = "target.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, filename: str, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / filename

    def database_uri(self, filename: str) -> str:
        return f"sqlite+pysqlite:///{self.database_path(filename)}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings for the Source Site and Target Platform databases."""

    source_uri: str
    target_uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("ENROLSYNC_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    source_uri = os.getenv("SOURCE_DATABASE_URI")
    target_uri = os.getenv("TARGET_DATABASE_URI")
    if source_uri and target_uri:
        return DatabaseConfig(source_uri=source_uri, target_uri=target_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(
        source_uri=source_uri or storage_config.database_uri(SOURCE_DB_FILENAME),
        target_uri=target_uri or storage_config.database_uri(TARGET_DB_FILENAME),
    )
