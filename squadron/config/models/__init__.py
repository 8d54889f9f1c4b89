"""Configuration model exports.

    from squadron.config.models import LifecycleConfig, ProvisioningConfig
"""

from squadron.config.models.api import APIConfig
from squadron.config.models.lifecycle import LifecycleConfig
from squadron.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from squadron.config.models.provisioning import ProvisioningConfig
from squadron.config.models.storage import PostgresConfig, StorageConfig

__all__ = [
    # API
    "APIConfig",
    # Lifecycle
    "LifecycleConfig",
    # Observability
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    # Provisioning
    "ProvisioningConfig",
    # Storage
    "PostgresConfig",
    "StorageConfig",
]
