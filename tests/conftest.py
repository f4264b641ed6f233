from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from enrolsync.adapters.sqlalchemy import start_mappers
from enrolsync.adapters.sqlalchemy.migrations import upgrade_head
from enrolsync.adapters.sqlalchemy.store import SqlAlchemyRegistrationStore
from enrolsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProvisioningUnitOfWork,
    shutdown,
    startup,
)
from enrolsync.domain.model import StoreRole
from tests.helpers.provisioning import ProvisioningState

os.environ.setdefault("SOURCE_DATABASE_URI", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("TARGET_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


def _migrated_engine() -> Engine:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    return engine


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = _migrated_engine()
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_stores() -> Iterator[tuple[SqlAlchemyRegistrationStore, SqlAlchemyRegistrationStore]]:
    """Source and Target stores on two independent in-memory databases."""

    shutdown()
    startup(StoreRole.SOURCE, engine=_migrated_engine(), force=True)
    startup(StoreRole.TARGET, engine=_migrated_engine(), force=True)
    try:
        yield (
            SqlAlchemyRegistrationStore(StoreRole.SOURCE),
            SqlAlchemyRegistrationStore(StoreRole.TARGET),
        )
    finally:
        shutdown()


@pytest.fixture
def target_unit_of_work(
    sqlite_stores: tuple[SqlAlchemyRegistrationStore, SqlAlchemyRegistrationStore],
) -> Callable[[], SqlAlchemyProvisioningUnitOfWork]:
    del sqlite_stores
    return SqlAlchemyProvisioningUnitOfWork


@pytest.fixture
def provisioning_state() -> ProvisioningState:
    return ProvisioningState()
