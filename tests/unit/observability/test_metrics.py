"""Tests for Prometheus metrics emitted by lifecycle operations."""

import pytest
from prometheus_client import REGISTRY

from squadron.deployments.ledger import VersionLedger
from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.lifecycle.errors import ProvisionFailedError
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.lifecycle.reconciliation import ReconciliationScanner
from squadron.provisioning.context import StaticRuntimeContextProvider
from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.builtin import get_dental_clinic_template


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestLifecycleMetrics:
    """Metrics move when swaps and scans run."""

    async def test_successful_swap_counted(self) -> None:
        orchestrator = DeploymentOrchestrator(
            VersionLedger(InMemoryDeploymentStore()),
            InMemoryProvisioningClient(),
            StaticRuntimeContextProvider(),
        )
        labels = {"kind": "upgrade", "outcome": "succeeded"}
        before = sample("squadron_transitions_total", labels)

        await orchestrator.execute("acct-1", get_dental_clinic_template())

        assert sample("squadron_transitions_total", labels) == before + 1

    async def test_failed_swap_counted(self) -> None:
        provisioning = InMemoryProvisioningClient()
        provisioning.fail("create")
        orchestrator = DeploymentOrchestrator(
            VersionLedger(InMemoryDeploymentStore()),
            provisioning,
            StaticRuntimeContextProvider(),
        )
        labels = {"kind": "rollback", "outcome": "failed"}
        before = sample("squadron_transitions_total", labels)

        with pytest.raises(ProvisionFailedError):
            await orchestrator.execute("acct-1", get_dental_clinic_template(), is_rollback=True)

        assert sample("squadron_transitions_total", labels) == before + 1

    async def test_scan_sets_gauges(self) -> None:
        provisioning = InMemoryProvisioningClient()
        provisioning.add_resource("squad-1")
        provisioning.add_resource("squad-2")
        scanner = ReconciliationScanner(InMemoryDeploymentStore(), provisioning)

        await scanner.scan()

        assert sample("squadron_orphaned_resources") == 2
        assert sample("squadron_orphaned_deployments") == 0
