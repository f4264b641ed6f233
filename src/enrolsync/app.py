"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from enrolsync.adapters.email_function import SupabaseFunctionSender
from enrolsync.adapters.sqlalchemy import (
    SqlAlchemyProvisioningUnitOfWork,
    SqlAlchemyRegistrationStore,
)
from enrolsync.adapters.sqlalchemy.unit_of_work import is_started, startup
from enrolsync.adapters.supabase_auth import SupabaseIdentityProvider
from enrolsync.adapters.triggers import to_status_change
from enrolsync.config import (
    get_identity_config,
    get_notification_config,
    get_provisioning_config,
)
from enrolsync.domain.clock import utc_now
from enrolsync.domain.model import StoreRole
from enrolsync.domain.ports.unit_of_work import ProvisioningUnitOfWork
from enrolsync.domain.provisioning import (
    AccountProvisioner,
    EntitlementGrantor,
    ProvisioningChain,
    ProvisioningLeases,
    StudentEnroller,
    WelcomeNotifier,
)
from enrolsync.domain.reconciliation import PropagationOutcome, PropagationResult
from enrolsync.domain.registration_sync import RegistrationSync, StatusChangeResult

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.engine import Engine

    from enrolsync.adapters.triggers import StatusChangePayload
    from enrolsync.config import IdentityConfig, NotificationConfig, ProvisioningConfig
    from enrolsync.domain.clock import Clock
    from enrolsync.domain.ports import IdentityProvider, MessageSender, RegistrationStore
    from enrolsync.domain.registration_sync import SweepReport, SyncResult

UnitOfWorkFactory = Callable[[], ProvisioningUnitOfWork]


log = getLogger(__name__)


def start_stores(
    *,
    source_engine: Engine | None = None,
    target_engine: Engine | None = None,
) -> None:
    """Initialise both database adapters unless they are already running."""

    for role, engine in ((StoreRole.SOURCE, source_engine), (StoreRole.TARGET, target_engine)):
        if not is_started(role):
            startup(role, engine=engine)


def build_provisioning_chain(
    *,
    identity: IdentityProvider | None = None,
    sender: MessageSender | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    provisioning_config: ProvisioningConfig | None = None,
    identity_config: IdentityConfig | None = None,
    notification_config: NotificationConfig | None = None,
    clock: Clock = utc_now,
) -> ProvisioningChain:
    """Wire the provisioning steps against configured or injected adapters."""

    settings = provisioning_config or get_provisioning_config()
    uow_factory = unit_of_work_factory or SqlAlchemyProvisioningUnitOfWork
    identity_config = identity_config or get_identity_config()
    identity = identity or SupabaseIdentityProvider(config=identity_config)
    notification_config = notification_config or get_notification_config()
    sender = sender or SupabaseFunctionSender(config=notification_config)

    return ProvisioningChain(
        accounts=AccountProvisioner(
            unit_of_work_factory=uow_factory, identity=identity, clock=clock
        ),
        students=StudentEnroller(unit_of_work_factory=uow_factory, clock=clock),
        entitlements=EntitlementGrantor(
            unit_of_work_factory=uow_factory,
            tier=settings.trial_tier,
            trial_days=settings.trial_days,
        ),
        notifier=WelcomeNotifier(
            sender=sender,
            identity=identity,
            unit_of_work_factory=uow_factory,
            reset_redirect_url=identity_config.reset_redirect_url,
            login_url=notification_config.login_url,
            trial_days=settings.trial_days,
        ),
        leases=ProvisioningLeases(
            unit_of_work_factory=uow_factory,
            ttl_seconds=settings.lease_ttl_seconds,
            enabled=settings.lease_enabled,
            clock=clock,
        ),
        budget_seconds=settings.invocation_timeout_seconds,
        clock=clock,
    )


def build_registration_sync(
    *,
    source: RegistrationStore | None = None,
    target: RegistrationStore | None = None,
    chain: ProvisioningChain | None = None,
    clock: Clock = utc_now,
) -> RegistrationSync:
    if source is None or target is None:
        start_stores()
    return RegistrationSync(
        source=source or SqlAlchemyRegistrationStore(StoreRole.SOURCE),
        target=target or SqlAlchemyRegistrationStore(StoreRole.TARGET),
        chain=chain or build_provisioning_chain(clock=clock),
        clock=clock,
    )


def sync_registration(
    registration_id: UUID,
    *,
    sync: RegistrationSync | None = None,
) -> SyncResult:
    """Provision a single approved registration (the per-record sync request)."""

    service = sync or build_registration_sync()
    log.info("Starting sync for registration %s", registration_id)
    result = service.sync_registration(registration_id)
    log.info("Finished sync for registration %s: %s", registration_id, result.outcome)
    return result


def sweep_registrations(*, sync: RegistrationSync | None = None) -> SweepReport:
    """Reconcile every Source Site registration into the Target Platform."""

    service = sync or build_registration_sync()
    report = service.sweep()
    log.info(
        "Sweep finished: %s; provisioned=%s, errors=%s",
        report.message,
        len(report.provisioned),
        len(report.errors),
    )
    return report


def handle_status_change(
    payload: StatusChangePayload,
    *,
    changed_in: StoreRole,
    sync: RegistrationSync | None = None,
) -> StatusChangeResult | None:
    """Handle a database-webhook status change raised by ``changed_in``.

    Payloads without a row, non-UPDATE events and updates that do not move the
    status to a review outcome are acknowledged and ignored.
    """

    change = to_status_change(payload)
    if change is None:
        return None
    if not change.is_review_transition:
        log.info(
            "Ignoring %s on registration %s: not a review decision",
            change.operation,
            change.record.id,
        )
        return StatusChangeResult(
            change.record.id, PropagationResult(PropagationOutcome.IGNORED)
        )
    service = sync or build_registration_sync()
    return service.handle_status_change(change, changed_in=changed_in)
