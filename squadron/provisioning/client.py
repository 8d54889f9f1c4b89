"""ProvisioningClient abstract interface.

The provisioning API owns the live squad resources and the inbound phone
number bindings that route calls to them. Every call may fail or hang;
callers wrap each one in an explicit timeout.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Resource(BaseModel):
    """A live resource as reported by the provisioning API."""

    id: str
    name: str | None = None
    created_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProvisioningError(Exception):
    """Raised when the provisioning API rejects or fails a call."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.status_code = status_code


class ProvisioningClient(ABC):
    """Abstract interface for the external provisioning API."""

    @abstractmethod
    async def create_resource(self, payload: dict[str, Any]) -> str:
        """Create a resource from a payload, returning its id."""
        pass

    @abstractmethod
    async def delete_resource(self, resource_id: str) -> bool:
        """Delete a resource. Returns False if the API refused."""
        pass

    @abstractmethod
    async def list_resources(self) -> list[Resource]:
        """List every live resource owned by this service."""
        pass

    @abstractmethod
    async def update_routing(self, binding_id: str, resource_id: str) -> bool:
        """Point an inbound binding at a resource. Returns False if refused."""
        pass

    async def close(self) -> None:
        """Release any underlying connections."""
        return None
