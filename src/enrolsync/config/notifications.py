"""Welcome-message delivery configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy, service_role_headers

DEFAULT_SEND_FUNCTION: Final[str] = "send-email"
DEFAULT_APP_URL: Final[str] = "https://edudashpro.org.za"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class NotificationConfig:
    project_url: str
    service_role_key: str
    function_name: str = DEFAULT_SEND_FUNCTION
    app_url: str = DEFAULT_APP_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def function_url(self) -> str:
        return f"{self.project_url.rstrip('/')}/functions/v1/{self.function_name}"

    @property
    def login_url(self) -> str:
        return f"{self.app_url.rstrip('/')}/login"

    @property
    def resilience(self) -> ResilienceConfig:
        return ResilienceConfig(
            name="send-email",
            timeout_seconds=self.timeout_seconds,
            retry=RetryPolicy(total=2),
            default_headers=service_role_headers(self.service_role_key),
        )

    @classmethod
    def from_environment(cls) -> NotificationConfig:
        values = require_env_vars(("TARGET_SUPABASE_URL", "TARGET_SERVICE_ROLE_KEY"))
        return cls(
            project_url=values["TARGET_SUPABASE_URL"],
            service_role_key=values["TARGET_SERVICE_ROLE_KEY"],
            function_name=optional_env_var("SEND_EMAIL_FUNCTION", DEFAULT_SEND_FUNCTION),
            app_url=optional_env_var("APP_URL", DEFAULT_APP_URL),
        )


def get_notification_config() -> NotificationConfig:
    return NotificationConfig.from_environment()
