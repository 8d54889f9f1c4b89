"""Tests for DeploymentOrchestrator swaps."""

import asyncio

import pytest

from squadron.deployments.ledger import VersionLedger
from squadron.lifecycle.errors import (
    ProvisionFailedError,
    RoutingUpdateFailedError,
    TemplateInactiveError,
)
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.builtin import get_dental_clinic_template
from squadron.templates.models import Template
from tests.factories.lifecycle import TemplateFactory


@pytest.fixture
async def deployed(
    orchestrator: DeploymentOrchestrator,
    provisioning: InMemoryProvisioningClient,
) -> str:
    """acct-1 running the built-in; returns its live resource id."""
    transition = await orchestrator.execute("acct-1", get_dental_clinic_template())
    provisioning.calls.clear()
    return transition.new_resource_id


class TestSwapOrdering:
    """Create, then re-route, then delete."""

    async def test_call_order(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
        deployed: str,
        v2_template: Template,
    ) -> None:
        transition = await orchestrator.execute("acct-1", v2_template)

        assert [op for op, _ in provisioning.calls] == ["create", "update_routing", "delete"]
        assert provisioning.calls[0][1] == transition.new_resource_id
        assert provisioning.calls[1][1] == transition.new_resource_id
        assert provisioning.calls[2][1] == deployed
        assert provisioning.bindings["phone-1"] == transition.new_resource_id

    async def test_first_deploy_has_nothing_to_delete(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        transition = await orchestrator.execute("acct-1", get_dental_clinic_template())

        assert [op for op, _ in provisioning.calls] == ["create", "update_routing"]
        assert transition.from_version is None
        assert transition.old_resource_id is None

    async def test_without_binding_routing_is_skipped(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        await orchestrator.execute("acct-unbound", get_dental_clinic_template())

        assert [op for op, _ in provisioning.calls] == ["create"]


class TestSuccessfulSwap:
    """Ledger effects of a successful swap."""

    async def test_last_transition_matches_deployment(
        self,
        orchestrator: DeploymentOrchestrator,
        ledger: VersionLedger,
        deployed: str,
        v2_template: Template,
    ) -> None:
        before = await ledger.load_or_create("acct-1")

        transition = await orchestrator.execute("acct-1", v2_template, actor="alice")

        after = await ledger.load_or_create("acct-1")
        assert len(after.history) == len(before.history) + 1
        assert after.last_transition == transition
        assert after.last_transition.to_version == after.current_version == "v2.0"
        assert after.current_template_id == v2_template.id
        assert after.external_resource_id == transition.new_resource_id
        assert transition.old_resource_id == deployed
        assert transition.from_version == "v1.0"
        assert transition.from_template_name == "dental-clinic"
        assert transition.actor == "alice"
        assert transition.delete_failed is False

    async def test_default_actor_recorded(
        self,
        orchestrator: DeploymentOrchestrator,
        v2_template: Template,
    ) -> None:
        transition = await orchestrator.execute("acct-1", v2_template)

        assert transition.actor == "tests"

    async def test_rollback_flag_recorded(
        self,
        orchestrator: DeploymentOrchestrator,
        v2_template: Template,
    ) -> None:
        transition = await orchestrator.execute("acct-1", v2_template, is_rollback=True)

        assert transition.is_rollback is True


class TestFailedSwap:
    """Failures leave the tenant on a working resource."""

    async def test_create_failure_changes_nothing(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
        ledger: VersionLedger,
        deployed: str,
        v2_template: Template,
    ) -> None:
        before = (await ledger.load_or_create("acct-1")).model_dump()
        provisioning.fail("create")

        with pytest.raises(ProvisionFailedError) as exc_info:
            await orchestrator.execute("acct-1", v2_template)

        after = (await ledger.load_or_create("acct-1")).model_dump()
        assert after == before
        assert exc_info.value.account_id == "acct-1"
        assert [op for op, _ in provisioning.calls] == ["create"]
        assert deployed in provisioning.resources

    async def test_create_timeout(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
        ledger: VersionLedger,
        deployed: str,
        v2_template: Template,
    ) -> None:
        provisioning.delay("create", 1.0)

        with pytest.raises(ProvisionFailedError):
            await orchestrator.execute("acct-1", v2_template)

        deployment = await ledger.load_or_create("acct-1")
        assert deployment.external_resource_id == deployed
        assert len(deployment.history) == 1

    async def test_routing_failure_discards_new_resource(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
        ledger: VersionLedger,
        deployed: str,
        v2_template: Template,
    ) -> None:
        before = (await ledger.load_or_create("acct-1")).model_dump()
        provisioning.fail("update_routing")

        with pytest.raises(RoutingUpdateFailedError):
            await orchestrator.execute("acct-1", v2_template)

        new_resource_id = provisioning.calls[0][1]
        assert provisioning.calls[-1] == ("delete", new_resource_id)
        assert new_resource_id not in provisioning.resources
        assert deployed in provisioning.resources
        assert provisioning.bindings["phone-1"] == deployed
        assert (await ledger.load_or_create("acct-1")).model_dump() == before

    async def test_delete_failure_is_not_fatal(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
        ledger: VersionLedger,
        deployed: str,
        v2_template: Template,
    ) -> None:
        provisioning.fail("delete")

        transition = await orchestrator.execute("acct-1", v2_template)

        deployment = await ledger.load_or_create("acct-1")
        assert transition.delete_failed is True
        assert deployment.deleted_resource_id == deployed
        assert deployment.external_resource_id == transition.new_resource_id

    async def test_inactive_target_rejected(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
    ) -> None:
        inactive = TemplateFactory.create(is_active=False)

        with pytest.raises(TemplateInactiveError):
            await orchestrator.execute("acct-1", inactive)

        assert provisioning.calls == []


class TestTenantSerialization:
    """At most one swap per tenant at a time."""

    async def test_concurrent_swaps_serialize(
        self,
        orchestrator: DeploymentOrchestrator,
        provisioning: InMemoryProvisioningClient,
        ledger: VersionLedger,
        deployed: str,
        v2_template: Template,
    ) -> None:
        provisioning.delay("create", 0.05)

        first, second = await asyncio.gather(
            orchestrator.execute("acct-1", v2_template),
            orchestrator.execute("acct-1", get_dental_clinic_template()),
        )

        history = await ledger.history("acct-1")
        assert len(history) == 3
        assert second.old_resource_id == first.new_resource_id
        assert not orchestrator.locks.is_locked("acct-1")
