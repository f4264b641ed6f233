"""``RegistrationStore`` over one deployment's SQLAlchemy engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from enrolsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyRegistrationUnitOfWork

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from enrolsync.domain.model import RegistrationRecord, StoreRole
    from enrolsync.domain.ports import RegistrationUnitOfWork


class SqlAlchemyRegistrationStore:
    """Every call runs in its own unit of work and returns detached records."""

    def __init__(
        self,
        role: StoreRole,
        *,
        unit_of_work_factory: Callable[[], RegistrationUnitOfWork] | None = None,
    ) -> None:
        self._role = role
        self._uow_factory = unit_of_work_factory or (
            lambda: SqlAlchemyRegistrationUnitOfWork(role)
        )

    @property
    def role(self) -> StoreRole:
        return self._role

    def get(self, registration_id: uuid.UUID) -> RegistrationRecord | None:
        with self._uow_factory() as uow:
            return uow.repositories.registrations.get(registration_id)

    def get_by_foreign_id(self, foreign_id: uuid.UUID) -> RegistrationRecord | None:
        with self._uow_factory() as uow:
            return uow.repositories.registrations.get_by_foreign_id(foreign_id)

    def list_all(self) -> Sequence[RegistrationRecord]:
        with self._uow_factory() as uow:
            return list(uow.repositories.registrations.list_all())

    def add(self, record: RegistrationRecord) -> None:
        with self._uow_factory() as uow:
            uow.repositories.registrations.add(record)
            uow.commit()

    def update_fields(self, registration_id: uuid.UUID, values: Mapping[str, object]) -> bool:
        with self._uow_factory() as uow:
            matched = uow.repositories.registrations.update_fields(registration_id, values)
            uow.commit()
        return matched

    def delete_many(self, registration_ids: Iterable[uuid.UUID]) -> int:
        with self._uow_factory() as uow:
            deleted = uow.repositories.registrations.delete_many(registration_ids)
            uow.commit()
        return deleted
