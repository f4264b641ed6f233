"""Defaults for account provisioning and trial grants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_flag, env_float, env_int, optional_env_var

DEFAULT_TRIAL_DAYS: Final[int] = 7
DEFAULT_TRIAL_TIER: Final[str] = "parent_plus"
DEFAULT_INVOCATION_TIMEOUT_SECONDS: Final[float] = 55.0
DEFAULT_LEASE_TTL_SECONDS: Final[float] = 120.0


@dataclass(frozen=True, slots=True)
class ProvisioningConfig:
    trial_days: int = DEFAULT_TRIAL_DAYS
    trial_tier: str = DEFAULT_TRIAL_TIER
    invocation_timeout_seconds: float = DEFAULT_INVOCATION_TIMEOUT_SECONDS
    lease_enabled: bool = True
    lease_ttl_seconds: float = DEFAULT_LEASE_TTL_SECONDS

    @classmethod
    def from_environment(cls) -> ProvisioningConfig:
        return cls(
            trial_days=env_int("TRIAL_DAYS", DEFAULT_TRIAL_DAYS),
            trial_tier=optional_env_var("TRIAL_TIER", DEFAULT_TRIAL_TIER),
            invocation_timeout_seconds=env_float(
                "INVOCATION_TIMEOUT_SECONDS", DEFAULT_INVOCATION_TIMEOUT_SECONDS
            ),
            lease_enabled=env_flag("PROVISIONING_LEASE_ENABLED", default=True),
            lease_ttl_seconds=env_float(
                "PROVISIONING_LEASE_TTL_SECONDS", DEFAULT_LEASE_TTL_SECONDS
            ),
        )


def get_provisioning_config() -> ProvisioningConfig:
    return ProvisioningConfig.from_environment()
