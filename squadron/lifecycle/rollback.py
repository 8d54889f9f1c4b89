"""Rollback: resolve a previous template and swap back to it."""

import asyncio

from squadron.config.models.lifecycle import LifecycleConfig
from squadron.deployments.ledger import VersionLedger
from squadron.lifecycle.errors import LifecycleError, NoHistoryError
from squadron.lifecycle.models import RollbackBatch, RollbackResult, RollbackStatus
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.observability.logging import get_logger
from squadron.templates.models import Template
from squadron.templates.registry import TemplateRegistry

logger = get_logger(__name__)


class RollbackResolver:
    """Decides which template a rollback returns a tenant to.

    Priority:
    1. explicit template id (must exist and be active)
    2. use_built_in
    3. the template the last transition moved away from, looked up by name
    4. the built-in, when that name is absent, missing or inactive

    A tenant with no history and no explicit choice cannot be rolled back.
    """

    def __init__(self, registry: TemplateRegistry, ledger: VersionLedger) -> None:
        self._registry = registry
        self._ledger = ledger

    async def resolve_rollback_target(
        self,
        account_id: str,
        explicit_template_id: str | None = None,
        use_built_in: bool = False,
    ) -> Template:
        """Resolve the rollback target for a tenant.

        Raises:
            TemplateNotFoundError: If the explicit template does not exist
            TemplateInactiveError: If the explicit template is inactive
            NoHistoryError: If there is no history and no explicit choice
        """
        if explicit_template_id is not None:
            return await self._registry.get_deployable(explicit_template_id)

        if use_built_in:
            return self._registry.get_builtin()

        last = await self._ledger.last_transition(account_id)
        if last is None:
            raise NoHistoryError(
                "No upgrade history found. Specify a target template or use the built-in.",
                account_id=account_id,
            )

        if last.from_template_name:
            previous = await self._registry.get_latest_by_name(last.from_template_name)
            if previous is not None and previous.is_active:
                return previous
            logger.warning(
                "rollback_previous_template_unusable",
                account_id=account_id,
                template_name=last.from_template_name,
                missing=previous is None,
            )

        return self._registry.get_builtin()


class RollbackService:
    """Rolls tenants back through the orchestrator."""

    def __init__(
        self,
        resolver: RollbackResolver,
        orchestrator: DeploymentOrchestrator,
        config: LifecycleConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._orchestrator = orchestrator
        self._config = config or LifecycleConfig()

    async def rollback(
        self,
        account_id: str,
        *,
        explicit_template_id: str | None = None,
        use_built_in: bool = False,
        actor: str | None = None,
    ) -> RollbackResult:
        """Roll one tenant back.

        Raises:
            LifecycleError: If the target cannot be resolved or the swap fails
        """

        async def resolve_target() -> Template:
            return await self._resolver.resolve_rollback_target(
                account_id, explicit_template_id, use_built_in
            )

        transition = await self._orchestrator.execute_resolved(
            account_id,
            resolve_target,
            actor=actor or self._config.default_actor,
            is_rollback=True,
        )
        return RollbackResult(
            account_id=account_id,
            status=RollbackStatus.ROLLED_BACK,
            from_version=transition.from_version,
            to_version=transition.to_version,
            to_template_name=transition.to_template_name,
            transition=transition,
        )

    async def rollback_many(
        self,
        account_ids: list[str],
        *,
        explicit_template_id: str | None = None,
        use_built_in: bool = False,
        actor: str | None = None,
    ) -> RollbackBatch:
        """Roll back several tenants, capturing each outcome."""
        semaphore = asyncio.Semaphore(self._config.bulk_max_concurrency)

        async def run(account_id: str) -> RollbackResult:
            async with semaphore:
                try:
                    return await asyncio.shield(
                        self.rollback(
                            account_id,
                            explicit_template_id=explicit_template_id,
                            use_built_in=use_built_in,
                            actor=actor,
                        )
                    )
                except NoHistoryError as e:
                    return RollbackResult(
                        account_id=account_id,
                        status=RollbackStatus.NO_HISTORY,
                        error_code=e.code,
                        reason=e.message,
                    )
                except LifecycleError as e:
                    return RollbackResult(
                        account_id=account_id,
                        status=RollbackStatus.FAILED,
                        error_code=e.code,
                        reason=e.message,
                    )
                except Exception as e:
                    logger.exception("rollback_error", account_id=account_id, error=str(e))
                    return RollbackResult(
                        account_id=account_id,
                        status=RollbackStatus.FAILED,
                        reason=str(e),
                    )

        results = await asyncio.gather(*(run(a) for a in dict.fromkeys(account_ids)))
        batch = RollbackBatch(results=list(results))

        summary = batch.summary
        logger.info(
            "rollback_batch_completed",
            total=summary.total,
            rolled_back=summary.rolled_back,
            failed=summary.failed,
            no_history=summary.no_history,
        )
        return batch
