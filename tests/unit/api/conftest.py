"""Shared fixtures for API tests."""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from squadron.api.app import create_app
from squadron.api.dependencies import (
    get_context_provider,
    get_deployment_store,
    get_provisioning_client,
    get_settings,
    get_template_store,
    get_tenant_locks,
)
from squadron.config.models.provisioning import ProvisioningConfig
from squadron.config.settings import Settings, set_toml_config
from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.lifecycle.locks import TenantLocks
from squadron.provisioning.context import RuntimeContext, StaticRuntimeContextProvider
from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.stores.inmemory import InMemoryTemplateStore


@pytest.fixture
def settings() -> Settings:
    set_toml_config({})
    return Settings(provisioning=ProvisioningConfig(backend="inmemory"))


@pytest.fixture
def template_store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture
def deployment_store() -> InMemoryDeploymentStore:
    return InMemoryDeploymentStore()


@pytest.fixture
def provisioning() -> InMemoryProvisioningClient:
    return InMemoryProvisioningClient()


@pytest.fixture
def context_provider() -> StaticRuntimeContextProvider:
    return StaticRuntimeContextProvider(
        [RuntimeContext(account_id="acct-1", clinic_name="Bright Smiles", routing_binding_id="phone-1")]
    )


@pytest.fixture
def app(
    settings: Settings,
    template_store: InMemoryTemplateStore,
    deployment_store: InMemoryDeploymentStore,
    provisioning: InMemoryProvisioningClient,
    context_provider: StaticRuntimeContextProvider,
) -> FastAPI:
    """Create test FastAPI app with in-memory dependencies."""
    app = create_app()
    locks = TenantLocks()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_template_store] = lambda: template_store
    app.dependency_overrides[get_deployment_store] = lambda: deployment_store
    app.dependency_overrides[get_provisioning_client] = lambda: provisioning
    app.dependency_overrides[get_context_provider] = lambda: context_provider
    app.dependency_overrides[get_tenant_locks] = lambda: locks

    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client."""
    with TestClient(app) as test_client:
        yield test_client
