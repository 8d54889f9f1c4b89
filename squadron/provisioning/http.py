"""HTTP provisioning client for the squad REST API."""

import os
from typing import Any

import httpx

from squadron.config.models.provisioning import ProvisioningConfig
from squadron.observability import metrics
from squadron.observability.logging import get_logger
from squadron.provisioning.client import ProvisioningClient, ProvisioningError, Resource

logger = get_logger(__name__)


class HttpProvisioningClient(ProvisioningClient):
    """Talks to the squad REST API over httpx.

    Endpoints:
    - POST /squad creates a squad
    - DELETE /squad/{id} deletes one (404 counts as already deleted)
    - GET /squad lists squads
    - PATCH /phone-number/{id} re-points an inbound number at a squad
    """

    def __init__(
        self,
        config: ProvisioningConfig,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Provisioning configuration (base URL and timeouts)
            api_key: API key; read from config.api_key_env when omitted
            client: Preconfigured httpx client (used in tests)
        """
        self._config = config
        self._api_key = api_key or os.environ.get(config.api_key_env, "")
        self._client = client

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def create_resource(self, payload: dict[str, Any]) -> str:
        client = await self._ensure_client()
        response = await self._send(
            "create",
            client.post("/squad", json=payload, timeout=self._config.create_timeout_seconds),
        )
        if response.status_code >= 300:
            raise self._error("create", response)

        resource_id = response.json().get("id")
        if not resource_id:
            raise ProvisioningError(
                "Create response did not include a resource id", operation="create"
            )
        logger.info("provisioning_resource_created", resource_id=resource_id)
        return str(resource_id)

    async def delete_resource(self, resource_id: str) -> bool:
        client = await self._ensure_client()
        response = await self._send(
            "delete",
            client.delete(
                f"/squad/{resource_id}", timeout=self._config.delete_timeout_seconds
            ),
        )
        if response.status_code == 404:
            logger.info("provisioning_resource_already_deleted", resource_id=resource_id)
            return True
        if response.status_code >= 300:
            logger.warning(
                "provisioning_delete_refused",
                resource_id=resource_id,
                status_code=response.status_code,
            )
            return False
        return True

    async def list_resources(self) -> list[Resource]:
        client = await self._ensure_client()
        response = await self._send(
            "list",
            client.get(
                "/squad", params={"limit": 1000}, timeout=self._config.list_timeout_seconds
            ),
        )
        if response.status_code >= 300:
            raise self._error("list", response)

        return [
            Resource(
                id=item["id"],
                name=item.get("name"),
                created_at=item.get("createdAt"),
                metadata=item.get("metadata") or {},
            )
            for item in response.json()
        ]

    async def update_routing(self, binding_id: str, resource_id: str) -> bool:
        client = await self._ensure_client()
        response = await self._send(
            "update_routing",
            client.patch(
                f"/phone-number/{binding_id}",
                json={"squadId": resource_id, "assistantId": None},
                timeout=self._config.routing_timeout_seconds,
            ),
        )
        if response.status_code >= 300:
            logger.warning(
                "provisioning_routing_refused",
                binding_id=binding_id,
                status_code=response.status_code,
            )
            return False
        return True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, operation: str, request: Any) -> httpx.Response:
        try:
            response = await request
        except httpx.TimeoutException as e:
            metrics.PROVISIONING_CALLS.labels(operation=operation, outcome="timeout").inc()
            raise TimeoutError(f"Provisioning {operation} timed out") from e
        except httpx.HTTPError as e:
            metrics.PROVISIONING_CALLS.labels(operation=operation, outcome="error").inc()
            raise ProvisioningError(
                f"Provisioning {operation} failed: {e}", operation=operation
            ) from e

        outcome = "success" if response.status_code < 300 else "rejected"
        metrics.PROVISIONING_CALLS.labels(operation=operation, outcome=outcome).inc()
        return response

    def _error(self, operation: str, response: httpx.Response) -> ProvisioningError:
        return ProvisioningError(
            f"Provisioning {operation} returned {response.status_code}: {response.text[:200]}",
            operation=operation,
            status_code=response.status_code,
        )
