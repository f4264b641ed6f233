"""Exactly-once guardian account provisioning.

One account per normalized guardian email, however many times the approval
event is delivered. Each invocation takes exactly one path:

1) EXISTING_PROFILE: a profile exists; reuse it and repair a missing identity
   reference in place. No new identity, no welcome message.
2) REPAIRED_IDENTITY: an identity exists without a profile (left behind by an
   earlier crash); issue it a fresh one-time password and create the profile
   with ``id = identity.id``.
3) CREATED: neither exists; create the identity, then the profile.

Only CREATED counts as a new account for trial grants and welcome messages.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.domain.clock import utc_now
from enrolsync.domain.errors import (
    DuplicateRecordError,
    IdentityConflictError,
    ProvisioningError,
    StoreError,
)
from enrolsync.domain.model import (
    AccountRole,
    GuardianProfile,
    ProfileSeed,
    ProvisioningPath,
)

from .names import split_guardian_name

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from enrolsync.domain.clock import Clock
    from enrolsync.domain.model import AuthIdentity, RegistrationRecord
    from enrolsync.domain.ports import IdentityProvider, ProvisioningUnitOfWork

log = getLogger(__name__)


def generate_one_time_password() -> str:
    return secrets.token_urlsafe(12)


@dataclass(frozen=True, slots=True)
class AccountOutcome:
    profile_id: UUID
    identity_id: UUID
    email: str
    path: ProvisioningPath
    one_time_password: str | None = None

    @property
    def is_new(self) -> bool:
        return self.path is ProvisioningPath.CREATED


def profile_seed_for(registration: RegistrationRecord) -> ProfileSeed:
    first_name, last_name = split_guardian_name(
        registration.guardian_name,
        fallback_last_name=registration.student_last_name,
    )
    return ProfileSeed(
        email=registration.normalized_email,
        first_name=first_name,
        last_name=last_name,
        phone=registration.guardian_phone,
        address=registration.guardian_address,
        organization_id=registration.organization_id,
    )


class AccountProvisioner:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], ProvisioningUnitOfWork],
        identity: IdentityProvider,
        password_factory: Callable[[], str] = generate_one_time_password,
        clock: Clock = utc_now,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._identity = identity
        self._password_factory = password_factory
        self._clock = clock

    def provision(self, registration: RegistrationRecord) -> AccountOutcome:
        seed = profile_seed_for(registration)
        if not seed.email:
            raise ProvisioningError(f"Registration {registration.id} has no guardian email")

        profile = self._find_profile(seed.email)
        if profile is not None:
            return self._reuse_profile(profile)

        identity, password, path = self._resolve_identity(seed, registration)
        if not self._create_profile(identity, seed):
            profile = self._find_profile(seed.email)
            if profile is None:
                raise ProvisioningError(
                    f"Profile insert for {seed.email} conflicted but no profile exists"
                )
            log.info("Profile for %s was created concurrently", seed.email)
            return self._reuse_profile(profile)

        log.info("Provisioned guardian %s for %s via %s", identity.id, seed.email, path)
        return AccountOutcome(
            profile_id=identity.id,
            identity_id=identity.id,
            email=seed.email,
            path=path,
            one_time_password=password,
        )

    def _find_profile(self, email: str) -> GuardianProfile | None:
        with self._uow_factory() as uow:
            return uow.repositories.profiles.find_by_email(email, role=AccountRole.PARENT)

    def _reuse_profile(self, profile: GuardianProfile) -> AccountOutcome:
        log.info("Guardian profile %s already exists for %s", profile.id, profile.email)
        if not profile.has_identity_reference:
            log.info("Repairing missing identity reference on profile %s", profile.id)
            with self._uow_factory() as uow:
                stored = uow.repositories.profiles.get(profile.id)
                if stored is not None and stored.auth_user_id is None:
                    stored.auth_user_id = profile.id
                    uow.commit()
        return AccountOutcome(
            profile_id=profile.id,
            identity_id=profile.auth_user_id or profile.id,
            email=profile.email,
            path=ProvisioningPath.EXISTING_PROFILE,
        )

    def _resolve_identity(
        self,
        seed: ProfileSeed,
        registration: RegistrationRecord,
    ) -> tuple[AuthIdentity, str, ProvisioningPath]:
        password = self._password_factory()
        identity = self._identity.find_by_email(seed.email)
        if identity is not None:
            log.info("Found identity %s without a profile; issuing a fresh password", identity.id)
            self._identity.update_password(identity.id, password)
            return identity, password, ProvisioningPath.REPAIRED_IDENTITY

        metadata: dict[str, object] = {
            "full_name": registration.guardian_name,
            "phone": registration.guardian_phone,
            "role": AccountRole.PARENT.value,
        }
        try:
            identity = self._identity.create_identity(
                email=seed.email,
                password=password,
                metadata=metadata,
            )
        except IdentityConflictError:
            # Another invocation created it between our lookup and create.
            identity = self._identity.find_by_email(seed.email)
            if identity is None:
                raise
            log.info(
                "Identity for %s was created concurrently; reusing %s", seed.email, identity.id
            )
            self._identity.update_password(identity.id, password)
            return identity, password, ProvisioningPath.REPAIRED_IDENTITY

        log.info("Created identity %s for %s", identity.id, seed.email)
        return identity, password, ProvisioningPath.CREATED

    def _create_profile(self, identity: AuthIdentity, seed: ProfileSeed) -> bool:
        """Insert the profile; return False when a concurrent insert won."""

        profile = GuardianProfile(
            id=identity.id,
            auth_user_id=identity.id,
            email=seed.email,
            role=AccountRole.PARENT,
            organization_id=seed.organization_id,
            first_name=seed.first_name,
            last_name=seed.last_name,
            phone=seed.phone,
            address=seed.address,
            created_at=self._clock(),
        )
        try:
            with self._uow_factory() as uow:
                uow.repositories.profiles.add(profile)
                uow.commit()
        except DuplicateRecordError:
            return False
        except StoreError as exc:
            raise ProvisioningError(f"Failed to create guardian profile: {exc}") from exc
        return True
