"""Provisioning API client configuration."""

from typing import Literal

from pydantic import BaseModel, Field

ProvisioningBackend = Literal["http", "inmemory"]


class ProvisioningConfig(BaseModel):
    """Configuration for the external squad provisioning API.

    Every remote call runs under an explicit timeout. The API key is never
    stored in config files; it is read from the environment variable named
    by `api_key_env`.
    """

    backend: ProvisioningBackend = Field(
        default="http",
        description="Provisioning client implementation",
    )
    base_url: str = Field(
        default="https://api.vapi.ai",
        description="Base URL of the provisioning API",
    )
    api_key_env: str = Field(
        default="VAPI_API_KEY",
        description="Environment variable holding the API key",
    )
    create_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for resource creation"
    )
    delete_timeout_seconds: float = Field(
        default=15.0, gt=0, description="Timeout for resource deletion"
    )
    routing_timeout_seconds: float = Field(
        default=15.0, gt=0, description="Timeout for routing updates"
    )
    list_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for listing resources"
    )
