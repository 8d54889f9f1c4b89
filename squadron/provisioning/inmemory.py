"""In-memory provisioning client for development and testing."""

import asyncio
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from squadron.provisioning.client import ProvisioningClient, ProvisioningError, Resource


class InMemoryProvisioningClient(ProvisioningClient):
    """Keeps resources and routing bindings in dicts.

    Every call is appended to `calls` as (operation, id) so tests can
    assert ordering. Failures and delays can be injected per operation.
    """

    def __init__(self) -> None:
        self.resources: dict[str, Resource] = {}
        self.bindings: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self._failures: dict[str, Exception] = {}
        self._delays: dict[str, float] = {}

    def fail(self, operation: str, error: Exception | None = None) -> None:
        """Make every future call to an operation raise."""
        self._failures[operation] = error or ProvisioningError(
            f"Injected {operation} failure", operation=operation
        )

    def delay(self, operation: str, seconds: float) -> None:
        """Make every future call to an operation sleep first."""
        self._delays[operation] = seconds

    def reset_faults(self) -> None:
        """Clear injected failures and delays."""
        self._failures.clear()
        self._delays.clear()

    def add_resource(self, resource_id: str, name: str | None = None) -> Resource:
        """Seed a live resource without going through create."""
        resource = Resource(id=resource_id, name=name, created_at=datetime.now(UTC))
        self.resources[resource_id] = resource
        return resource

    async def create_resource(self, payload: dict[str, Any]) -> str:
        await self._enter("create", "")
        resource_id = f"squad-{uuid4().hex[:12]}"
        self.calls[-1] = ("create", resource_id)
        self.resources[resource_id] = Resource(
            id=resource_id,
            name=payload.get("name"),
            created_at=datetime.now(UTC),
            metadata={"members": len(payload.get("members", []))},
        )
        return resource_id

    async def delete_resource(self, resource_id: str) -> bool:
        await self._enter("delete", resource_id)
        self.resources.pop(resource_id, None)
        return True

    async def list_resources(self) -> list[Resource]:
        await self._enter("list", "")
        return list(self.resources.values())

    async def update_routing(self, binding_id: str, resource_id: str) -> bool:
        await self._enter("update_routing", resource_id)
        self.bindings[binding_id] = resource_id
        return True

    async def _enter(self, operation: str, resource_id: str) -> None:
        self.calls.append((operation, resource_id))
        if operation in self._delays:
            await asyncio.sleep(self._delays[operation])
        if operation in self._failures:
            raise self._failures[operation]
