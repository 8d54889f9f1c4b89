"""Dependency injection for API routes.

Provides FastAPI dependencies for stores, the provisioning client and the
lifecycle services. Instances are created once and reused; tests override
them through app.dependency_overrides or reset them with reset_dependencies.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from squadron.config.loader import load_config
from squadron.config.settings import Settings, set_toml_config
from squadron.db.pool import PostgresPool
from squadron.deployments.ledger import VersionLedger
from squadron.deployments.store import DeploymentStore
from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.deployments.stores.postgres import PostgresDeploymentStore
from squadron.lifecycle.locks import TenantLocks
from squadron.lifecycle.orchestrator import DeploymentOrchestrator
from squadron.lifecycle.overview import VersionOverviewService
from squadron.lifecycle.planner import MigrationPlanner
from squadron.lifecycle.reconciliation import ReconciliationScanner
from squadron.lifecycle.resolver import VersionResolver
from squadron.lifecycle.rollback import RollbackResolver, RollbackService
from squadron.observability.logging import get_logger
from squadron.provisioning.client import ProvisioningClient
from squadron.provisioning.context import RuntimeContextProvider, StaticRuntimeContextProvider
from squadron.provisioning.http import HttpProvisioningClient
from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.registry import TemplateRegistry
from squadron.templates.store import TemplateStore
from squadron.templates.stores.inmemory import InMemoryTemplateStore
from squadron.templates.stores.postgres import PostgresTemplateStore

logger = get_logger(__name__)

_postgres_pool: PostgresPool | None = None
_template_store: TemplateStore | None = None
_deployment_store: DeploymentStore | None = None
_provisioning_client: ProvisioningClient | None = None
_context_provider: RuntimeContextProvider | None = None
_tenant_locks: TenantLocks | None = None


@lru_cache
def get_settings() -> Settings:
    """Get application settings.

    Loads configuration from TOML files and environment variables.
    Cached to avoid reloading on every request.
    """
    try:
        set_toml_config(load_config())
    except FileNotFoundError:
        logger.warning("config_file_not_found", msg="Using default configuration")
        set_toml_config({})

    return Settings()


async def get_postgres_pool(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PostgresPool:
    """Get the shared PostgreSQL connection pool, connecting on first access."""
    global _postgres_pool
    if _postgres_pool is None:
        pool = PostgresPool(settings.storage.postgres)
        await pool.connect()
        _postgres_pool = pool
    return _postgres_pool


async def get_template_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TemplateStore:
    """Get the TemplateStore instance.

    Uses PostgreSQL when configured, falling back to in-memory storage if
    the database is unavailable.
    """
    global _template_store
    if _template_store is None:
        if settings.storage.backend == "postgres":
            try:
                pool = await get_postgres_pool(settings)
                _template_store = PostgresTemplateStore(pool)
                logger.info("template_store_initialized", store_type="postgres")
                return _template_store
            except Exception as e:
                logger.warning("template_store_postgres_failed_using_inmemory", error=str(e))
        _template_store = InMemoryTemplateStore()
        logger.info("template_store_initialized", store_type="inmemory")
    return _template_store


async def get_deployment_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> DeploymentStore:
    """Get the DeploymentStore instance.

    Uses PostgreSQL when configured, falling back to in-memory storage if
    the database is unavailable.
    """
    global _deployment_store
    if _deployment_store is None:
        if settings.storage.backend == "postgres":
            try:
                pool = await get_postgres_pool(settings)
                _deployment_store = PostgresDeploymentStore(pool)
                logger.info("deployment_store_initialized", store_type="postgres")
                return _deployment_store
            except Exception as e:
                logger.warning("deployment_store_postgres_failed_using_inmemory", error=str(e))
        _deployment_store = InMemoryDeploymentStore()
        logger.info("deployment_store_initialized", store_type="inmemory")
    return _deployment_store


def get_provisioning_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ProvisioningClient:
    """Get the provisioning API client."""
    global _provisioning_client
    if _provisioning_client is None:
        if settings.provisioning.backend == "http":
            _provisioning_client = HttpProvisioningClient(settings.provisioning)
        else:
            _provisioning_client = InMemoryProvisioningClient()
        logger.info("provisioning_client_initialized", backend=settings.provisioning.backend)
    return _provisioning_client


def get_context_provider() -> RuntimeContextProvider:
    """Get the tenant runtime context provider."""
    global _context_provider
    if _context_provider is None:
        _context_provider = StaticRuntimeContextProvider()
    return _context_provider


def get_tenant_locks() -> TenantLocks:
    """Get the process-wide per-tenant lock registry."""
    global _tenant_locks
    if _tenant_locks is None:
        _tenant_locks = TenantLocks()
    return _tenant_locks


def get_registry(
    store: Annotated[TemplateStore, Depends(get_template_store)],
) -> TemplateRegistry:
    """Get the template registry."""
    return TemplateRegistry(store)


def get_ledger(
    store: Annotated[DeploymentStore, Depends(get_deployment_store)],
) -> VersionLedger:
    """Get the version ledger."""
    return VersionLedger(store)


def get_orchestrator(
    ledger: Annotated[VersionLedger, Depends(get_ledger)],
    provisioning: Annotated[ProvisioningClient, Depends(get_provisioning_client)],
    context_provider: Annotated[RuntimeContextProvider, Depends(get_context_provider)],
    locks: Annotated[TenantLocks, Depends(get_tenant_locks)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DeploymentOrchestrator:
    """Get a deployment orchestrator sharing the process-wide tenant locks."""
    return DeploymentOrchestrator(
        ledger=ledger,
        provisioning=provisioning,
        context_provider=context_provider,
        config=settings.provisioning,
        locks=locks,
        default_actor=settings.lifecycle.default_actor,
    )


def get_version_resolver(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    ledger: Annotated[VersionLedger, Depends(get_ledger)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VersionResolver:
    """Get the version resolver."""
    return VersionResolver(registry, ledger, settings.lifecycle)


def get_planner(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    store: Annotated[DeploymentStore, Depends(get_deployment_store)],
    orchestrator: Annotated[DeploymentOrchestrator, Depends(get_orchestrator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MigrationPlanner:
    """Get the migration planner."""
    return MigrationPlanner(registry, store, orchestrator, settings.lifecycle)


def get_rollback_service(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    ledger: Annotated[VersionLedger, Depends(get_ledger)],
    orchestrator: Annotated[DeploymentOrchestrator, Depends(get_orchestrator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RollbackService:
    """Get the rollback service."""
    return RollbackService(RollbackResolver(registry, ledger), orchestrator, settings.lifecycle)


def get_rollback_resolver(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    ledger: Annotated[VersionLedger, Depends(get_ledger)],
) -> RollbackResolver:
    """Get the rollback resolver."""
    return RollbackResolver(registry, ledger)


def get_reconciliation_scanner(
    store: Annotated[DeploymentStore, Depends(get_deployment_store)],
    provisioning: Annotated[ProvisioningClient, Depends(get_provisioning_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReconciliationScanner:
    """Get the reconciliation scanner."""
    return ReconciliationScanner(store, provisioning, settings.provisioning)


def get_overview_service(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
    store: Annotated[DeploymentStore, Depends(get_deployment_store)],
) -> VersionOverviewService:
    """Get the version overview service."""
    return VersionOverviewService(registry, store)


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
TemplateStoreDep = Annotated[TemplateStore, Depends(get_template_store)]
DeploymentStoreDep = Annotated[DeploymentStore, Depends(get_deployment_store)]
ProvisioningClientDep = Annotated[ProvisioningClient, Depends(get_provisioning_client)]
TemplateRegistryDep = Annotated[TemplateRegistry, Depends(get_registry)]
VersionLedgerDep = Annotated[VersionLedger, Depends(get_ledger)]
OrchestratorDep = Annotated[DeploymentOrchestrator, Depends(get_orchestrator)]
VersionResolverDep = Annotated[VersionResolver, Depends(get_version_resolver)]
PlannerDep = Annotated[MigrationPlanner, Depends(get_planner)]
RollbackServiceDep = Annotated[RollbackService, Depends(get_rollback_service)]
RollbackResolverDep = Annotated[RollbackResolver, Depends(get_rollback_resolver)]
ReconciliationScannerDep = Annotated[ReconciliationScanner, Depends(get_reconciliation_scanner)]
OverviewServiceDep = Annotated[VersionOverviewService, Depends(get_overview_service)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies, closing connections first.

    Used for testing to ensure fresh instances.
    """
    global _postgres_pool, _template_store, _deployment_store
    global _provisioning_client, _context_provider, _tenant_locks

    if _postgres_pool is not None:
        await _postgres_pool.close()
        _postgres_pool = None

    if _provisioning_client is not None:
        await _provisioning_client.close()
        _provisioning_client = None

    _template_store = None
    _deployment_store = None
    _context_provider = None
    _tenant_locks = None
    get_settings.cache_clear()
