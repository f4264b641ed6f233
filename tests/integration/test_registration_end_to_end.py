"""Full pipeline runs against two SQLite databases with fake outbound adapters."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from enrolsync.adapters.sqlalchemy import SqlAlchemyProvisioningUnitOfWork
from enrolsync.adapters.sqlalchemy.mappings import (
    ai_tier_table,
    ai_usage_table,
    profile_table,
    student_table,
)
from enrolsync.app import build_provisioning_chain, build_registration_sync
from enrolsync.config import IdentityConfig, NotificationConfig, ProvisioningConfig
from enrolsync.domain.model import AccountRole, RegistrationStatus, StoreRole
from enrolsync.domain.reconciliation import StatusChange
from tests.helpers.provisioning import FakeIdentityProvider, RecordingSender
from tests.helpers.registrations import FIXED_NOW, approve, fixed_clock, make_registration

if TYPE_CHECKING:
    from sqlalchemy import Table

    from enrolsync.adapters.sqlalchemy import SqlAlchemyRegistrationStore
    from enrolsync.domain.model import RegistrationRecord

type StorePair = tuple[SqlAlchemyRegistrationStore, SqlAlchemyRegistrationStore]

COUNTED_TABLES: tuple[Table, ...] = (profile_table, student_table, ai_tier_table, ai_usage_table)


class _Pipeline:
    def __init__(self, stores: StorePair) -> None:
        self.source, self.target = stores
        self.identity = FakeIdentityProvider()
        self.sender = RecordingSender()
        target_url = "https://target.example.test"
        chain = build_provisioning_chain(
            identity=self.identity,
            sender=self.sender,
            provisioning_config=ProvisioningConfig(invocation_timeout_seconds=30.0),
            identity_config=IdentityConfig(project_url=target_url, service_role_key="key"),
            notification_config=NotificationConfig(project_url=target_url, service_role_key="key"),
            clock=fixed_clock,
        )
        self.sync = build_registration_sync(
            source=self.source, target=self.target, chain=chain, clock=fixed_clock
        )

    def counts(self) -> dict[str, int]:
        with SqlAlchemyProvisioningUnitOfWork() as uow:
            return {
                table.name: uow.session.execute(
                    select(func.count()).select_from(table)
                ).scalar_one()
                for table in COUNTED_TABLES
            }


def _approved(email: str = "a@x.com") -> RegistrationRecord:
    record = make_registration(guardian_email=email)
    approve(record)
    return record


def test_approved_registration_is_provisioned_once(sqlite_stores: StorePair) -> None:
    pipeline = _Pipeline(sqlite_stores)
    record = _approved()
    pipeline.source.add(record)

    report = pipeline.sync.sweep()

    assert report.errors == []
    [provisioned] = report.provisioned
    assert pipeline.counts() == {
        "profiles": 1,
        "students": 1,
        "user_ai_tiers": 1,
        "user_ai_usage": 1,
    }
    with SqlAlchemyProvisioningUnitOfWork() as uow:
        profile = uow.repositories.profiles.find_by_email("a@x.com", role=AccountRole.PARENT)
        grant = uow.repositories.ai_tiers.find_for_user(provisioned.guardian_id)
    assert profile is not None
    assert profile.id == provisioned.guardian_id
    assert profile.trial_ends_at == FIXED_NOW + timedelta(days=7)
    assert grant is not None
    assert grant.expires_at == FIXED_NOW + timedelta(days=7)
    assert [message.to for message in pipeline.sender.sent] == ["a@x.com"]

    source_row = pipeline.source.get(record.id)
    assert source_row is not None
    assert source_row.synced_to_target
    assert source_row.target_guardian_id == provisioned.guardian_id
    assert source_row.target_student_id == provisioned.student_id


def test_redelivery_creates_nothing_new(
    sqlite_stores: StorePair,
    caplog: pytest.LogCaptureFixture,
) -> None:
    pipeline = _Pipeline(sqlite_stores)
    record = _approved()
    pipeline.source.add(record)
    pipeline.sync.sync_registration(record.id)
    before = pipeline.counts()

    with caplog.at_level(logging.INFO):
        result = pipeline.sync.sync_registration(record.id)

    assert result.provisioning is not None
    assert not result.provisioning.account.is_new
    assert pipeline.counts() == before
    assert len(pipeline.sender.sent) == 1
    assert "already exists, skipped" in caplog.text


def test_deleted_origin_removes_only_its_mirror(sqlite_stores: StorePair) -> None:
    pipeline = _Pipeline(sqlite_stores)
    record = make_registration()
    pipeline.source.add(record)
    walk_in = make_registration(guardian_email="walk-in@example.com")
    pipeline.target.add(walk_in)
    pipeline.sync.sweep()
    assert pipeline.target.get_by_foreign_id(record.id) is not None

    pipeline.source.delete_many([record.id])
    report = pipeline.sync.sweep()

    assert report.sweep.deleted == 1
    assert pipeline.target.get_by_foreign_id(record.id) is None
    assert [row.id for row in pipeline.target.list_all()] == [walk_in.id]


def test_deleting_a_mirror_does_not_delete_the_origin(sqlite_stores: StorePair) -> None:
    pipeline = _Pipeline(sqlite_stores)
    record = make_registration()
    pipeline.source.add(record)
    pipeline.sync.sweep()
    mirror = pipeline.target.get_by_foreign_id(record.id)
    assert mirror is not None

    pipeline.target.delete_many([mirror.id])
    pipeline.sync.sweep()

    assert pipeline.source.get(record.id) is not None
    assert pipeline.target.get_by_foreign_id(record.id) is not None


def test_review_on_target_flows_back_to_source(sqlite_stores: StorePair) -> None:
    pipeline = _Pipeline(sqlite_stores)
    record = make_registration()
    pipeline.source.add(record)
    pipeline.sync.sweep()
    mirror = pipeline.target.get_by_foreign_id(record.id)
    assert mirror is not None
    approve(mirror)
    pipeline.target.update_fields(
        mirror.id,
        {"status": mirror.status, "reviewed_by": mirror.reviewed_by, "reviewed_at": FIXED_NOW},
    )

    result = pipeline.sync.handle_status_change(
        StatusChange(record=mirror, previous_status=RegistrationStatus.PENDING),
        changed_in=StoreRole.TARGET,
    )

    assert result.provisioning is not None
    source_row = pipeline.source.get(record.id)
    assert source_row is not None
    assert source_row.status is RegistrationStatus.APPROVED
    assert source_row.reviewed_by == mirror.reviewed_by
    assert source_row.target_guardian_id == result.provisioning.guardian_id
    assert pipeline.sync.sweep().provisioned == []
