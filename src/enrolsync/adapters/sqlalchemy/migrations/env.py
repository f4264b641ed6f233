"""Alembic environment configuration for enrolsync.

Run against a specific deployment with ``alembic -x store=source|target``;
the URL then comes from ``SOURCE_DATABASE_URI`` / ``TARGET_DATABASE_URI``.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

from enrolsync.adapters.sqlalchemy import mapper_registry, start_mappers
from enrolsync.config import get_database_config

config = context.config

start_mappers()

target_metadata = mapper_registry.metadata


def _database_url() -> str:
    explicit = config.get_main_option("sqlalchemy.url")
    if explicit:
        return explicit
    store = context.get_x_argument(as_dictionary=True).get(
        "store", config.attributes.get("store", "target")
    )
    database_config = get_database_config()
    return database_config.source_uri if store == "source" else database_config.target_uri


def _run(**options: object) -> None:
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=True,
        compare_type=True,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    _run(url=_database_url(), literal_binds=True)


def run_migrations_online() -> None:
    # upgrade_head(engine=...) hands over an open connection
    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        _run(connection=existing_connection)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _run(connection=connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
