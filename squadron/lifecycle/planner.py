"""Migration planner: bulk upgrade planning and execution.

Planning is read-only. A plan lists every candidate tenant with a status
(pending, or skipped with a reason) plus an advisory diff of what changes.
Executing a plan hands each pending tenant to the orchestrator with
bounded concurrency; one tenant's failure is recorded in its entry and
never stops the batch.
"""

import asyncio
from collections import Counter

from squadron.config.models.lifecycle import LifecycleConfig
from squadron.deployments.models import Deployment
from squadron.deployments.store import DeploymentStore
from squadron.lifecycle.errors import ErrorCode, LifecycleError
from squadron.lifecycle.models import (
    ACCOUNT_NOT_FOUND,
    ALREADY_ON_TARGET,
    BULK_RUN_CANCELLED,
    NO_RESOURCE_DEPLOYED,
    PlanStatus,
    UpgradeFilter,
    UpgradePlan,
    UpgradePlanEntry,
)
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.observability import metrics
from squadron.observability.logging import get_logger
from squadron.templates.diff import MigrationReport, compare_templates
from squadron.templates.models import Template
from squadron.templates.registry import TemplateRegistry
from squadron.templates.versioning import same_version

logger = get_logger(__name__)


class MigrationPlanner:
    """Plans and runs bulk upgrades to a target template."""

    def __init__(
        self,
        registry: TemplateRegistry,
        deployments: DeploymentStore,
        orchestrator: DeploymentOrchestrator,
        config: LifecycleConfig | None = None,
    ) -> None:
        """Initialize the planner.

        Args:
            registry: Template lookups
            deployments: Deployment records to plan over
            orchestrator: Executes swaps when not a dry run
            config: Concurrency and default actor
        """
        self._registry = registry
        self._deployments = deployments
        self._orchestrator = orchestrator
        self._config = config or LifecycleConfig()

    async def plan_bulk_upgrade(
        self,
        target_template_id: str,
        filter: UpgradeFilter | None = None,
        *,
        force: bool = False,
        dry_run: bool = True,
        actor: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> UpgradePlan:
        """Plan a bulk upgrade and, unless dry_run, execute it.

        Args:
            target_template_id: Template every candidate should end up on
            filter: Candidate selection (all deployments when omitted)
            force: Redeploy tenants already on the target version
            dry_run: Return the plan without touching any resource
            actor: Recorded on every transition
            cancel_event: Once set, no new swaps start

        Returns:
            UpgradePlan with one entry per candidate

        Raises:
            TemplateNotFoundError: If the target does not exist
            TemplateInactiveError: If the target is inactive
        """
        target = await self._registry.get_deployable(target_template_id)
        filter = filter or UpgradeFilter()

        entries = await self._build_entries(target, filter, force)
        plan = UpgradePlan(
            target_template_id=target.id,
            target_template_name=target.name,
            target_version=target.version,
            dry_run=dry_run,
            force=force,
            entries=entries,
        )
        plan.migration = await self._migration_report(target, plan.pending_entries())

        summary = plan.summary
        logger.info(
            "bulk_upgrade_planned",
            target_template_id=target.id,
            target_version=target.version,
            dry_run=dry_run,
            force=force,
            total=summary.total,
            pending=summary.pending,
            skipped=summary.skipped,
            failed=summary.failed,
        )

        if dry_run:
            return plan

        return await self.execute_plan(
            plan, target, actor=actor, cancel_event=cancel_event
        )

    async def execute_plan(
        self,
        plan: UpgradePlan,
        target: Template,
        *,
        actor: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> UpgradePlan:
        """Run every pending entry through the orchestrator.

        Each started swap is shielded and always runs to completion; the
        cancel event only prevents new swaps from starting.
        """
        semaphore = asyncio.Semaphore(self._config.bulk_max_concurrency)
        actor = actor or self._config.default_actor

        async def run_entry(entry: UpgradePlanEntry) -> None:
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    entry.status = PlanStatus.SKIPPED
                    entry.reason = BULK_RUN_CANCELLED
                    plan.cancelled = True
                    return
                await self._run_entry(entry, target, actor)

        await asyncio.gather(
            *(run_entry(entry) for entry in plan.pending_entries()),
            return_exceptions=True,
        )

        for entry in plan.entries:
            metrics.BULK_ENTRIES.labels(status=entry.status.value).inc()

        summary = plan.summary
        logger.info(
            "bulk_upgrade_completed",
            target_template_id=target.id,
            total=summary.total,
            upgraded=summary.upgraded,
            skipped=summary.skipped,
            failed=summary.failed,
            cancelled=plan.cancelled,
        )
        return plan

    async def _run_entry(self, entry: UpgradePlanEntry, target: Template, actor: str) -> None:
        try:
            transition = await asyncio.shield(
                self._orchestrator.execute(entry.account_id, target, actor=actor)
            )
        except LifecycleError as e:
            entry.status = PlanStatus.FAILED
            entry.reason = e.message
            entry.error_code = e.code
            logger.warning(
                "bulk_entry_failed",
                account_id=entry.account_id,
                error_code=e.code.value,
                error=e.message,
            )
        except Exception as e:
            entry.status = PlanStatus.FAILED
            entry.reason = str(e)
            logger.exception("bulk_entry_error", account_id=entry.account_id, error=str(e))
        else:
            entry.status = PlanStatus.UPGRADED
            entry.transition_id = transition.id

    async def _build_entries(
        self, target: Template, filter: UpgradeFilter, force: bool
    ) -> list[UpgradePlanEntry]:
        entries: list[UpgradePlanEntry] = []

        if filter.account_ids is not None:
            candidates: list[Deployment] = []
            for account_id in dict.fromkeys(filter.account_ids):
                deployment = await self._deployments.get_deployment(account_id)
                if deployment is None:
                    entries.append(
                        UpgradePlanEntry(
                            account_id=account_id,
                            target_version=target.version,
                            status=PlanStatus.FAILED,
                            reason=ACCOUNT_NOT_FOUND,
                            error_code=ErrorCode.ACCOUNT_NOT_FOUND,
                        )
                    )
                    continue
                candidates.append(deployment)
        else:
            candidates = await self._deployments.list_deployments()

        for deployment in candidates:
            if filter.from_version is not None and not same_version(
                deployment.current_version, filter.from_version
            ):
                continue
            entries.append(self._classify(deployment, target, force))

        return entries

    def _classify(
        self, deployment: Deployment, target: Template, force: bool
    ) -> UpgradePlanEntry:
        entry = UpgradePlanEntry(
            account_id=deployment.account_id,
            current_version=deployment.current_version,
            current_template_name=deployment.current_template_name,
            target_version=target.version,
        )
        if not force and same_version(deployment.current_version, target.version):
            entry.status = PlanStatus.SKIPPED
            entry.reason = ALREADY_ON_TARGET
        elif not deployment.has_resource:
            entry.status = PlanStatus.SKIPPED
            entry.reason = NO_RESOURCE_DEPLOYED
        return entry

    async def _migration_report(
        self, target: Template, pending: list[UpgradePlanEntry]
    ) -> MigrationReport | None:
        """Diff the target against the most common current template of pending tenants."""
        try:
            baseline = self._registry.get_builtin()
            names = Counter(e.current_template_name for e in pending if e.current_template_name)
            if names:
                name, _ = names.most_common(1)[0]
                current = await self._registry.get_latest_by_name(name)
                if current is not None:
                    baseline = current
            return compare_templates(baseline, target)
        except Exception as e:
            logger.warning("migration_report_failed", target_template_id=target.id, error=str(e))
            return None
