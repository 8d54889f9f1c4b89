"""Deployment orchestrator: zero-downtime swaps of a tenant's live resource.

A swap always runs create, then re-route, then delete. The old resource
keeps serving calls until the new one exists and routing points at it, so
a failure at any step leaves the tenant with a working resource:

- create fails: nothing changed, no transition recorded
- routing fails: the new resource is deleted (best effort), nothing recorded
- delete fails: the swap succeeds and the stale resource id is recorded
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from structlog.contextvars import bound_contextvars

from squadron.config.models.provisioning import ProvisioningConfig
from squadron.deployments.ledger import VersionLedger
from squadron.deployments.models import Deployment, Transition
from squadron.lifecycle.errors import (
    ProvisionFailedError,
    ResourceDeleteFailedError,
    RoutingUpdateFailedError,
    TemplateInactiveError,
)
from squadron.lifecycle.locks import TenantLocks
from squadron.observability import metrics
from squadron.observability.logging import get_logger
from squadron.provisioning.client import ProvisioningClient
from squadron.provisioning.context import RuntimeContext, RuntimeContextProvider
from squadron.templates.models import Template
from squadron.templates.payload import build_squad_payload

logger = get_logger(__name__)


class DeploymentOrchestrator:
    """The only component that changes live resources or the ledger.

    At most one swap runs per tenant at a time; swaps for different
    tenants run concurrently.
    """

    def __init__(
        self,
        ledger: VersionLedger,
        provisioning: ProvisioningClient,
        context_provider: RuntimeContextProvider,
        config: ProvisioningConfig | None = None,
        locks: TenantLocks | None = None,
        default_actor: str = "system",
    ) -> None:
        """Initialize the orchestrator.

        Args:
            ledger: Version ledger recording transitions
            provisioning: Client for the provisioning API
            context_provider: Source of per-tenant runtime context
            config: Timeouts for provisioning calls
            locks: Per-tenant lock registry (shared across orchestrators if given)
            default_actor: Actor recorded when none is supplied
        """
        self._ledger = ledger
        self._provisioning = provisioning
        self._context_provider = context_provider
        self._config = config or ProvisioningConfig()
        self._locks = locks or TenantLocks()
        self._default_actor = default_actor

    @property
    def locks(self) -> TenantLocks:
        """Per-tenant lock registry."""
        return self._locks

    async def execute(
        self,
        account_id: str,
        target_template: Template,
        runtime_context: RuntimeContext | None = None,
        *,
        actor: str | None = None,
        is_rollback: bool = False,
    ) -> Transition:
        """Swap a tenant's live resource to a target template.

        Args:
            account_id: Tenant to swap
            target_template: Template to deploy (must be active)
            runtime_context: Tenant context; fetched from the provider if omitted
            actor: Who triggered the swap
            is_rollback: Marks the transition as a rollback

        Returns:
            The recorded transition

        Raises:
            TemplateInactiveError: If the target is inactive
            ProvisionFailedError: If the new resource could not be created
            RoutingUpdateFailedError: If routing could not be moved
        """

        async def fixed_target() -> Template:
            return target_template

        return await self.execute_resolved(
            account_id,
            fixed_target,
            runtime_context,
            actor=actor,
            is_rollback=is_rollback,
        )

    async def execute_resolved(
        self,
        account_id: str,
        resolve_target: Callable[[], Awaitable[Template]],
        runtime_context: RuntimeContext | None = None,
        *,
        actor: str | None = None,
        is_rollback: bool = False,
    ) -> Transition:
        """Swap to a target that is chosen while the tenant lock is held.

        Use this when the target depends on the tenant's history, as
        rollbacks do. Errors from resolve_target propagate unchanged.
        """
        kind = "rollback" if is_rollback else "upgrade"

        with bound_contextvars(account_id=account_id, swap_kind=kind):
            async with self._locks.hold(account_id):
                target_template = await resolve_target()
                if not target_template.is_active:
                    raise TemplateInactiveError(
                        f"Template {target_template.name} ({target_template.version}) is inactive",
                        account_id=account_id,
                    )

                start = time.perf_counter()
                try:
                    transition = await self._swap(
                        account_id,
                        target_template,
                        runtime_context,
                        actor=actor or self._default_actor,
                        is_rollback=is_rollback,
                    )
                except Exception:
                    metrics.TRANSITIONS.labels(kind=kind, outcome="failed").inc()
                    raise

        metrics.TRANSITIONS.labels(kind=kind, outcome="succeeded").inc()
        metrics.SWAP_LATENCY.labels(kind=kind).observe(time.perf_counter() - start)
        return transition

    async def _swap(
        self,
        account_id: str,
        target: Template,
        runtime_context: RuntimeContext | None,
        *,
        actor: str,
        is_rollback: bool,
    ) -> Transition:
        deployment = await self._ledger.load_or_create(account_id)
        context = runtime_context or await self._context_provider.get_context(account_id)
        payload = build_squad_payload(target, context)

        logger.info(
            "swap_started",
            from_version=deployment.current_version,
            to_version=target.version,
            template_name=target.name,
            old_resource_id=deployment.external_resource_id,
        )

        new_resource_id = await self._create(account_id, payload)

        binding_id = deployment.routing_binding_id or context.routing_binding_id
        if binding_id is not None:
            await self._reroute(account_id, binding_id, new_resource_id)
        else:
            logger.info("swap_no_routing_binding", new_resource_id=new_resource_id)

        old_resource_id = deployment.external_resource_id
        delete_failed = False
        if old_resource_id is not None:
            try:
                await self._delete_old(account_id, old_resource_id)
            except ResourceDeleteFailedError as e:
                delete_failed = True
                metrics.RESOURCE_DELETE_FAILURES.inc()
                logger.warning(
                    "old_resource_delete_failed",
                    old_resource_id=old_resource_id,
                    error=e.message,
                    error_code=e.code.value,
                )

        transition = self._build_transition(
            deployment,
            target,
            new_resource_id,
            actor=actor,
            is_rollback=is_rollback,
            delete_failed=delete_failed,
        )
        await self._ledger.append(account_id, transition, routing_binding_id=binding_id)

        logger.info(
            "swap_completed",
            transition_id=transition.id,
            from_version=transition.from_version,
            to_version=transition.to_version,
            new_resource_id=new_resource_id,
            delete_failed=delete_failed,
        )
        return transition

    async def _create(self, account_id: str, payload: dict[str, Any]) -> str:
        try:
            return await asyncio.wait_for(
                self._provisioning.create_resource(payload),
                timeout=self._config.create_timeout_seconds,
            )
        except TimeoutError as e:
            logger.error("resource_create_timeout", timeout=self._config.create_timeout_seconds)
            raise ProvisionFailedError(
                "Resource creation timed out", account_id=account_id
            ) from e
        except Exception as e:
            logger.error("resource_create_failed", error=str(e))
            raise ProvisionFailedError(
                f"Resource creation failed: {e}", account_id=account_id
            ) from e

    async def _reroute(self, account_id: str, binding_id: str, new_resource_id: str) -> None:
        error: str
        try:
            updated = await asyncio.wait_for(
                self._provisioning.update_routing(binding_id, new_resource_id),
                timeout=self._config.routing_timeout_seconds,
            )
            if updated:
                return
            error = "routing update refused"
        except TimeoutError:
            error = "routing update timed out"
        except Exception as e:
            error = f"routing update failed: {e}"

        logger.error("routing_update_failed", error=error, new_resource_id=new_resource_id)
        await self._discard(new_resource_id)
        raise RoutingUpdateFailedError(
            f"Could not route calls to the new resource: {error}", account_id=account_id
        )

    async def _discard(self, resource_id: str) -> None:
        """Best-effort delete of a resource that never went live."""
        try:
            deleted = await asyncio.wait_for(
                self._provisioning.delete_resource(resource_id),
                timeout=self._config.delete_timeout_seconds,
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("unrouted_resource_cleanup_failed", resource_id=resource_id, error=str(e))
            return
        if not deleted:
            logger.warning("unrouted_resource_cleanup_refused", resource_id=resource_id)

    async def _delete_old(self, account_id: str, resource_id: str) -> None:
        try:
            deleted = await asyncio.wait_for(
                self._provisioning.delete_resource(resource_id),
                timeout=self._config.delete_timeout_seconds,
            )
        except TimeoutError as e:
            raise ResourceDeleteFailedError(
                "Resource deletion timed out", account_id=account_id
            ) from e
        except Exception as e:
            raise ResourceDeleteFailedError(
                f"Resource deletion failed: {e}", account_id=account_id
            ) from e

        if not deleted:
            raise ResourceDeleteFailedError("Resource deletion refused", account_id=account_id)

    def _build_transition(
        self,
        deployment: Deployment,
        target: Template,
        new_resource_id: str,
        *,
        actor: str,
        is_rollback: bool,
        delete_failed: bool,
    ) -> Transition:
        return Transition(
            account_id=deployment.account_id,
            from_version=deployment.current_version,
            from_template_name=deployment.current_template_name,
            to_version=target.version,
            to_template_name=target.name,
            to_template_id=target.id,
            old_resource_id=deployment.external_resource_id,
            new_resource_id=new_resource_id,
            actor=actor,
            is_rollback=is_rollback,
            delete_failed=delete_failed,
        )
