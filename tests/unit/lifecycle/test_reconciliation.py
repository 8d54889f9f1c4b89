"""Tests for ReconciliationScanner."""

import pytest

from squadron.config.models.provisioning import ProvisioningConfig
from squadron.deployments.ledger import VersionLedger
from squadron.deployments.models import Transition
from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.lifecycle.reconciliation import ReconciliationScanner
from squadron.provisioning.client import ProvisioningError
from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.builtin import get_dental_clinic_template


@pytest.fixture
def scanner(
    deployment_store: InMemoryDeploymentStore,
    provisioning: InMemoryProvisioningClient,
    provisioning_config: ProvisioningConfig,
) -> ReconciliationScanner:
    return ReconciliationScanner(deployment_store, provisioning, provisioning_config)


async def point(
    ledger: VersionLedger,
    account_id: str,
    resource_id: str,
    *,
    old_resource_id: str | None = None,
    delete_failed: bool = False,
) -> None:
    await ledger.append(
        account_id,
        Transition(
            account_id=account_id,
            to_version="v1.0",
            to_template_name="dental-clinic",
            to_template_id="builtin:dental-clinic",
            old_resource_id=old_resource_id,
            new_resource_id=resource_id,
            delete_failed=delete_failed,
        ),
    )


class TestScan:
    """Tests for scan."""

    async def test_finds_one_orphan_of_each_kind(
        self,
        scanner: ReconciliationScanner,
        ledger: VersionLedger,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        for i in range(1, 6):
            provisioning.add_resource(f"squad-{i}")
        for i in range(1, 5):
            await point(ledger, f"acct-{i}", f"squad-{i}")
        await point(ledger, "acct-5", "squad-gone")

        report = await scanner.scan()

        assert report.orphaned_resources == ["squad-5"]
        assert report.orphaned_deployments == ["acct-5"]
        assert report.resources_scanned == 5
        assert report.deployments_scanned == 5

    async def test_clean_state(
        self,
        scanner: ReconciliationScanner,
        ledger: VersionLedger,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        provisioning.add_resource("squad-1")
        await point(ledger, "acct-1", "squad-1")
        await ledger.load_or_create("acct-empty")

        report = await scanner.scan()

        assert report.orphaned_resources == []
        assert report.orphaned_deployments == []

    async def test_stale_deleted_resource_is_also_an_orphan(
        self,
        scanner: ReconciliationScanner,
        ledger: VersionLedger,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        provisioning.add_resource("squad-old")
        provisioning.add_resource("squad-new")
        await point(
            ledger, "acct-1", "squad-new", old_resource_id="squad-old", delete_failed=True
        )

        report = await scanner.scan()

        assert report.stale_deleted_resources == ["squad-old"]
        assert report.orphaned_resources == ["squad-old"]

    async def test_list_timeout_raises(
        self,
        scanner: ReconciliationScanner,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        provisioning.delay("list", 1.0)

        with pytest.raises(ProvisioningError):
            await scanner.scan()

    async def test_scan_is_read_only(
        self,
        scanner: ReconciliationScanner,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        provisioning.add_resource("squad-1")

        await scanner.scan()

        assert [op for op, _ in provisioning.calls] == ["list"]
        assert "squad-1" in provisioning.resources

    async def test_failed_delete_during_swap_leaves_orphan(
        self,
        scanner: ReconciliationScanner,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        first = await orchestrator.execute("acct-1", get_dental_clinic_template())
        provisioning.fail("delete")
        second = await orchestrator.execute("acct-1", get_dental_clinic_template())

        report = await scanner.scan()

        assert second.delete_failed
        assert report.orphaned_resources == [first.new_resource_id]
        assert report.stale_deleted_resources == [first.new_resource_id]
        assert report.orphaned_deployments == []
