"""Classify origin records against their mirrors.

Each origin record is NEW, CHANGED or UNCHANGED relative to the mirror store;
mirrors whose origin disappeared are ORPHANED. Only rows that carry
foreign-id provenance *and* were created as mirrors take part on the mirror
side, so rows authored directly in the mirror store are never orphan
candidates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.model import ChangeKind, is_approval_transition

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from enrolsync.domain.model import RegistrationRecord

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecordChange:
    kind: ChangeKind
    record: RegistrationRecord
    mirror: RegistrationRecord | None = None
    changed_fields: tuple[str, ...] = ()

    @property
    def is_approval(self) -> bool:
        """Whether applying this change moves the mirror into the approved state."""
        if self.kind is ChangeKind.NEW:
            return self.record.is_approved
        if self.kind is ChangeKind.CHANGED and self.mirror is not None:
            return is_approval_transition(self.mirror.status, self.record.status)
        return False


@dataclass(slots=True)
class Classification:
    new: list[RecordChange] = field(default_factory=list["RecordChange"])
    changed: list[RecordChange] = field(default_factory=list["RecordChange"])
    unchanged: list[RecordChange] = field(default_factory=list["RecordChange"])
    orphaned: list[RegistrationRecord] = field(default_factory=list["RegistrationRecord"])

    @property
    def is_empty(self) -> bool:
        return not (self.new or self.changed or self.orphaned)


def index_mirrors(mirror_records: Iterable[RegistrationRecord]) -> dict[UUID, RegistrationRecord]:
    """Index mirror-store rows with foreign-id provenance by that foreign id."""

    index: dict[UUID, RegistrationRecord] = {}
    for record in mirror_records:
        foreign_id = record.origin_id
        if foreign_id is None:
            continue
        if foreign_id in index:
            log.warning(
                "Mirror rows %s and %s both point at origin %s; keeping the first",
                index[foreign_id].id,
                record.id,
                foreign_id,
            )
            continue
        index[foreign_id] = record
    return index


def classify_record(record: RegistrationRecord, mirror: RegistrationRecord | None) -> RecordChange:
    if mirror is None:
        return RecordChange(ChangeKind.NEW, record)
    changed = mirror.differing_fields(record.mirrored_values())
    if changed:
        return RecordChange(ChangeKind.CHANGED, record, mirror, changed)
    return RecordChange(ChangeKind.UNCHANGED, record, mirror)


def classify_records(
    origin_records: Iterable[RegistrationRecord],
    mirror_records: Iterable[RegistrationRecord],
) -> Classification:
    """Compare the full origin set against the full mirror set."""

    mirrors = index_mirrors(mirror_records)
    classification = Classification()
    origin_ids: set[UUID] = set()

    for record in origin_records:
        if record.is_mirror:
            # Owned by the other store; it is that store's sweep that mirrors it.
            continue
        origin_ids.add(record.id)
        change = classify_record(record, mirrors.get(record.id))
        match change.kind:
            case ChangeKind.NEW:
                classification.new.append(change)
            case ChangeKind.CHANGED:
                classification.changed.append(change)
            case _:
                classification.unchanged.append(change)

    classification.orphaned.extend(
        mirror for foreign_id, mirror in mirrors.items() if foreign_id not in origin_ids
    )

    log.info(
        "Classified registrations: new=%s, changed=%s, unchanged=%s, orphaned=%s",
        len(classification.new),
        len(classification.changed),
        len(classification.unchanged),
        len(classification.orphaned),
    )
    return classification
