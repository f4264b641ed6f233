"""Utilities for managing Alembic migrations within the SQLAlchemy adapter."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _build_config(*, store: str) -> Config:
    """Return an Alembic Config pointing at the bundled migration scripts."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    config.attributes["store"] = store
    return config


def upgrade_head(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    store: str = "target",
) -> None:
    """Upgrade the database schema to the latest revision.

    With ``engine`` the migration runs on a connection borrowed from it;
    otherwise ``database_uri`` (or the configured URI for ``store``) is used.
    """

    config = _build_config(store=store)
    if engine is not None:
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    command.upgrade(config, "head")
