# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv
from pydantic import ValidationError

from enrolsync.adapters.triggers import parse_status_change, parse_sync_request
from enrolsync.app import handle_status_change, sweep_registrations, sync_registration
from enrolsync.config import ConfigurationError, configure_logging
from enrolsync.domain.errors import SyncError
from enrolsync.domain.model import StoreRole
from enrolsync.domain.registration_sync import SyncOutcome

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from enrolsync.domain.provisioning import ProvisioningResult
    from enrolsync.domain.registration_sync import StatusChangeResult, SweepReport, SyncResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Keep registrations in sync between the Source Site and Target Platform"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sweep", help="Reconcile all Source Site registrations")

    sync = subparsers.add_parser("sync", help="Provision one approved registration")
    sync.add_argument("registration_id", type=str, help="Registration id in either store")

    sync_request = subparsers.add_parser(
        "sync-request",
        help="Provision the registration named by a JSON sync request payload",
    )
    sync_request.add_argument(
        "payload",
        type=str,
        help="Path to the JSON payload, or '-' to read it from stdin",
    )

    status = subparsers.add_parser(
        "status-change",
        help="Handle a database-webhook status change payload",
    )
    status.add_argument(
        "payload",
        type=str,
        help="Path to the JSON payload, or '-' to read it from stdin",
    )
    status.add_argument(
        "--store",
        type=str,
        choices=[role.value for role in StoreRole],
        default=StoreRole.TARGET.value,
        help="Store whose trigger emitted the payload (default: target)",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _read_payload(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _provisioning_summary(result: ProvisioningResult) -> dict[str, object]:
    return {
        "guardian_id": str(result.guardian_id),
        "path": str(result.account.path),
        "student_id": str(result.student_id) if result.student_id else None,
        "class_id": str(result.class_id) if result.class_id else None,
        "trial_granted": bool(result.entitlement and result.entitlement.complete),
        "welcome_sent": bool(result.notification and result.notification.sent),
    }


def _sweep_summary(report: SweepReport) -> dict[str, object]:
    sweep = report.sweep
    return {
        "success": True,
        "message": report.message,
        "synced": sweep.synced,
        "updated": sweep.updated,
        "deleted": sweep.deleted,
        "total_in_origin": sweep.total_in_origin,
        "total_in_mirror_before": sweep.total_in_mirror_before,
        "provisioned": [_provisioning_summary(item) for item in report.provisioned],
        "errors": report.errors,
    }


def _sync_summary(result: SyncResult) -> dict[str, object]:
    return {
        "success": result.outcome is not SyncOutcome.NOT_FOUND,
        "outcome": str(result.outcome),
        "message": result.message,
        "registration_id": str(result.registration_id),
        "provisioning": (
            _provisioning_summary(result.provisioning) if result.provisioning else None
        ),
        "written_back": result.written_back,
        "errors": result.errors,
    }


def _status_change_summary(result: StatusChangeResult | None) -> dict[str, object]:
    if result is None:
        return {"success": True, "message": "No record in payload"}
    propagation = result.propagation
    return {
        "success": True,
        "registration_id": str(result.registration_id),
        "propagation": str(propagation.outcome),
        "counterpart_id": str(propagation.counterpart_id) if propagation.counterpart_id else None,
        "fields": list(propagation.fields),
        "provisioning": (
            _provisioning_summary(result.provisioning) if result.provisioning else None
        ),
        "errors": result.errors,
    }


def _prepare_command(args: argparse.Namespace) -> Callable[[], dict[str, object]]:
    """Validate the command input and return the call that runs it."""

    match args.command:
        case "sweep":
            return lambda: _sweep_summary(sweep_registrations())
        case "sync":
            registration_id = _parse_uuid(args.registration_id)
            return lambda: _sync_summary(sync_registration(registration_id))
        case "sync-request":
            requested_id = parse_sync_request(_read_payload(args.payload))
            return lambda: _sync_summary(sync_registration(requested_id))
        case "status-change":
            payload = parse_status_change(_read_payload(args.payload))
            changed_in = StoreRole(args.store)
            return lambda: _status_change_summary(
                handle_status_change(payload, changed_in=changed_in)
            )
        case _:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else None)

    try:
        command = _prepare_command(parsed_args)
    except (ValueError, ValidationError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        summary = command()
    except (SyncError, ConfigurationError, ValueError) as exc:
        log.exception("Fatal error during sync")
        print(json.dumps({"success": False, "error": str(exc)}))
        sys.exit(1)

    print(json.dumps(summary, indent=2))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
