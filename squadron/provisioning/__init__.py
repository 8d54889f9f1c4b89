"""Provisioning API clients and tenant runtime context."""

from squadron.provisioning.client import ProvisioningClient, ProvisioningError, Resource
from squadron.provisioning.context import (
    RuntimeContext,
    RuntimeContextProvider,
    StaticRuntimeContextProvider,
)

__all__ = [
    "ProvisioningClient",
    "ProvisioningError",
    "Resource",
    "RuntimeContext",
    "RuntimeContextProvider",
    "StaticRuntimeContextProvider",
]
