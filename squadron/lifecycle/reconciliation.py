"""Reconciliation scanner: finds drift between live resources and records."""

import asyncio

from squadron.config.models.provisioning import ProvisioningConfig
from squadron.deployments.store import DeploymentStore
from squadron.lifecycle.models import ReconciliationReport
from squadron.observability import metrics
from squadron.observability.logging import get_logger
from squadron.provisioning.client import ProvisioningClient, ProvisioningError

logger = get_logger(__name__)


class ReconciliationScanner:
    """Compares the provisioning API's resources with deployment records.

    Read-only: the report is for an operator, nothing is deleted or
    re-pointed automatically.
    """

    def __init__(
        self,
        deployments: DeploymentStore,
        provisioning: ProvisioningClient,
        config: ProvisioningConfig | None = None,
    ) -> None:
        self._deployments = deployments
        self._provisioning = provisioning
        self._config = config or ProvisioningConfig()

    async def scan(self) -> ReconciliationReport:
        """Scan for orphaned resources and orphaned deployments.

        Raises:
            ProvisioningError: If live resources cannot be listed
        """
        try:
            resources = await asyncio.wait_for(
                self._provisioning.list_resources(),
                timeout=self._config.list_timeout_seconds,
            )
        except TimeoutError as e:
            raise ProvisioningError("Listing resources timed out", operation="list") from e

        deployments = await self._deployments.list_deployments()

        live_ids = {resource.id for resource in resources}
        referenced = {d.external_resource_id for d in deployments if d.external_resource_id}
        stale = {d.deleted_resource_id for d in deployments if d.deleted_resource_id}

        report = ReconciliationReport(
            orphaned_resources=sorted(live_ids - referenced),
            orphaned_deployments=sorted(
                d.account_id
                for d in deployments
                if d.external_resource_id and d.external_resource_id not in live_ids
            ),
            stale_deleted_resources=sorted((stale & live_ids) - referenced),
            resources_scanned=len(live_ids),
            deployments_scanned=len(deployments),
        )

        metrics.ORPHANED_RESOURCES.set(len(report.orphaned_resources))
        metrics.ORPHANED_DEPLOYMENTS.set(len(report.orphaned_deployments))
        logger.info(
            "reconciliation_scan_completed",
            resources_scanned=report.resources_scanned,
            deployments_scanned=report.deployments_scanned,
            orphaned_resources=len(report.orphaned_resources),
            orphaned_deployments=len(report.orphaned_deployments),
            stale_deleted_resources=len(report.stale_deleted_resources),
        )
        return report
