"""Shared fixtures for lifecycle tests."""

import pytest

from squadron.config.models.lifecycle import LifecycleConfig
from squadron.config.models.provisioning import ProvisioningConfig
from squadron.deployments.ledger import VersionLedger
from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.provisioning.context import RuntimeContext, StaticRuntimeContextProvider
from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.models import Template
from squadron.templates.registry import TemplateRegistry
from squadron.templates.stores.inmemory import InMemoryTemplateStore
from tests.factories.lifecycle import TemplateFactory


@pytest.fixture
def template_store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture
def registry(template_store: InMemoryTemplateStore) -> TemplateRegistry:
    return TemplateRegistry(template_store)


@pytest.fixture
def deployment_store() -> InMemoryDeploymentStore:
    return InMemoryDeploymentStore()


@pytest.fixture
def ledger(deployment_store: InMemoryDeploymentStore) -> VersionLedger:
    return VersionLedger(deployment_store)


@pytest.fixture
def provisioning() -> InMemoryProvisioningClient:
    return InMemoryProvisioningClient()


@pytest.fixture
def context_provider() -> StaticRuntimeContextProvider:
    return StaticRuntimeContextProvider(
        [
            RuntimeContext(
                account_id="acct-1",
                clinic_name="Bright Smiles",
                routing_binding_id="phone-1",
            )
        ]
    )


@pytest.fixture
def provisioning_config() -> ProvisioningConfig:
    return ProvisioningConfig(
        backend="inmemory",
        create_timeout_seconds=0.2,
        delete_timeout_seconds=0.2,
        routing_timeout_seconds=0.2,
        list_timeout_seconds=0.2,
    )


@pytest.fixture
def lifecycle_config() -> LifecycleConfig:
    return LifecycleConfig(bulk_max_concurrency=3, default_actor="tests")


@pytest.fixture
def orchestrator(
    ledger: VersionLedger,
    provisioning: InMemoryProvisioningClient,
    context_provider: StaticRuntimeContextProvider,
    provisioning_config: ProvisioningConfig,
) -> DeploymentOrchestrator:
    return DeploymentOrchestrator(
        ledger=ledger,
        provisioning=provisioning,
        context_provider=context_provider,
        config=provisioning_config,
        default_actor="tests",
    )


@pytest.fixture
async def v2_template(registry: TemplateRegistry) -> Template:
    """An active stored template newer than the built-in."""
    return await registry.register(TemplateFactory.create(name="dental-clinic-v2", version="v2.0"))
