"""Identity provider (Supabase GoTrue admin API) configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, service_role_headers

DEFAULT_RESET_REDIRECT_URL: Final[str] = "https://edudashpro.org.za/reset-password"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0


@dataclass(frozen=True, slots=True)
class IdentityConfig:
    """Holds the Target Platform auth admin endpoint and credentials."""

    project_url: str
    service_role_key: str
    reset_redirect_url: str = DEFAULT_RESET_REDIRECT_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def admin_url(self) -> str:
        return f"{self.project_url.rstrip('/')}/auth/v1/admin"

    @property
    def resilience(self) -> ResilienceConfig:
        return ResilienceConfig(
            name="supabase-auth",
            base_url=f"{self.admin_url}/",
            timeout_seconds=self.timeout_seconds,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers=service_role_headers(self.service_role_key),
        )

    @classmethod
    def from_environment(cls) -> IdentityConfig:
        values = require_env_vars(("TARGET_SUPABASE_URL", "TARGET_SERVICE_ROLE_KEY"))
        return cls(
            project_url=values["TARGET_SUPABASE_URL"],
            service_role_key=values["TARGET_SERVICE_ROLE_KEY"],
            reset_redirect_url=optional_env_var(
                "PASSWORD_RESET_REDIRECT_URL", DEFAULT_RESET_REDIRECT_URL
            ),
        )


def get_identity_config() -> IdentityConfig:
    return IdentityConfig.from_environment()
