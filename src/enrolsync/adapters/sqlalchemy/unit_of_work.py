"""SQLAlchemy-backed units of work for the Source Site and Target Platform."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from enrolsync.adapters.sqlalchemy.mappings import start_mappers
from enrolsync.adapters.sqlalchemy.migrations import upgrade_head
from enrolsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyAiTierRepository,
    SqlAlchemyAiUsageRepository,
    SqlAlchemyClassAssignmentRepository,
    SqlAlchemyClassRepository,
    SqlAlchemyGuardianProfileRepository,
    SqlAlchemyLeaseRepository,
    SqlAlchemyOrganizationRepository,
    SqlAlchemyRegistrationRepository,
    SqlAlchemyStudentRepository,
)
from enrolsync.config import get_database_config
from enrolsync.domain.errors import DownstreamUnavailableError, DuplicateRecordError, StoreError
from enrolsync.domain.model import StoreRole
from enrolsync.domain.ports.unit_of_work import (
    ProvisioningRepositories,
    RegistrationRepositories,
    RepositoryCollection,
)

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    role: StoreRole
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                f"SQLAlchemy adapter for the {self.role} store not initialised. Call "
                "enrolsync.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATES: dict[StoreRole, _AdapterState] = {role: _AdapterState(role) for role in StoreRole}


def _default_uri(role: StoreRole) -> str:
    config = get_database_config()
    return config.source_uri if role is StoreRole.SOURCE else config.target_uri


def startup(
    role: StoreRole,
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, mappers, schema and session factory for one store."""

    state = _STATES[role]
    if state.engine is not None and not force:
        raise StartupError(
            f"SQLAlchemy adapter for the {role} store already initialised. "
            "Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or _default_uri(role), future=True)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    state.engine = resolved_engine
    log.info("Started %s store on %s", role, resolved_engine.url.render_as_string())


def configured_engine(role: StoreRole) -> Engine | None:
    """Return the engine currently managed for ``role`` (if any)."""

    return _STATES[role].engine


def is_started(role: StoreRole) -> bool:
    return _STATES[role].engine is not None


def shutdown(role: StoreRole | None = None) -> None:
    """Dispose managed engines and reset state (primarily for tests)."""

    roles = list(StoreRole) if role is None else [role]
    for current in roles:
        state = _STATES[current]
        if state.engine is not None:
            state.engine.dispose()
        state.engine = None


def translate_error(exc: SQLAlchemyError) -> Exception:
    """Map a driver-level failure onto the domain error taxonomy."""

    if isinstance(exc, IntegrityError):
        return DuplicateRecordError(str(exc.orig))
    if isinstance(exc, (OperationalError, InterfaceError)):
        return DownstreamUnavailableError(str(exc.orig))
    return StoreError(str(exc))


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections.

    SQLAlchemy errors raised inside the block are rolled back and re-raised as
    domain errors (``DuplicateRecordError``, ``DownstreamUnavailableError`` or
    ``StoreError``).
    """

    def __init__(self, role: StoreRole) -> None:
        self.role = role
        self.session_factory: sessionmaker[Session] = _STATES[role].session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        if isinstance(exc_value, SQLAlchemyError):
            raise translate_error(exc_value) from exc_value
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyRegistrationUnitOfWork(BaseSqlAlchemyUnitOfWork[RegistrationRepositories]):
    """Unit of work over one store's ``registration_requests`` table."""

    def _build_repositories(self, session: Session) -> RegistrationRepositories:
        return RegistrationRepositories(registrations=SqlAlchemyRegistrationRepository(session))


class SqlAlchemyProvisioningUnitOfWork(BaseSqlAlchemyUnitOfWork[ProvisioningRepositories]):
    """Unit of work for the Target Platform tables touched by provisioning."""

    def __init__(self) -> None:
        super().__init__(StoreRole.TARGET)

    def _build_repositories(self, session: Session) -> ProvisioningRepositories:
        return ProvisioningRepositories(
            profiles=SqlAlchemyGuardianProfileRepository(session),
            students=SqlAlchemyStudentRepository(session),
            classes=SqlAlchemyClassRepository(session),
            class_assignments=SqlAlchemyClassAssignmentRepository(session),
            organizations=SqlAlchemyOrganizationRepository(session),
            ai_tiers=SqlAlchemyAiTierRepository(session),
            ai_usage=SqlAlchemyAiUsageRepository(session),
            leases=SqlAlchemyLeaseRepository(session),
        )


if TYPE_CHECKING:
    from enrolsync.domain.ports.unit_of_work import (
        ProvisioningUnitOfWork,
        RegistrationUnitOfWork,
    )

    _uow_reg_check: RegistrationUnitOfWork = SqlAlchemyRegistrationUnitOfWork(StoreRole.SOURCE)
    _uow_prov_check: ProvisioningUnitOfWork = SqlAlchemyProvisioningUnitOfWork()
