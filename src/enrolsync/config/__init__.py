"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, env_int, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, service_role_headers
from .identity import IdentityConfig, get_identity_config
from .logging import configure_logging
from .notifications import NotificationConfig, get_notification_config
from .provisioning import ProvisioningConfig, get_provisioning_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "IdentityConfig",
    "MissingConfigurationError",
    "NotificationConfig",
    "ProvisioningConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "env_int",
    "get_database_config",
    "get_identity_config",
    "get_notification_config",
    "get_provisioning_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
    "service_role_headers",
]
