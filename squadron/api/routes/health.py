"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from squadron import __version__
from squadron.api.dependencies import (
    DeploymentStoreDep,
    ProvisioningClientDep,
    TemplateStoreDep,
)
from squadron.api.models.health import ComponentHealth, HealthResponse
from squadron.db.pool import PostgresPool
from squadron.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _check_store_health(store: object, name: str) -> ComponentHealth:
    """Check a store, pinging its database when it has one."""
    start = time.time()
    pool = getattr(store, "_pool", None)
    if isinstance(pool, PostgresPool) and not await pool.health_check():
        return ComponentHealth(
            name=name,
            status="unhealthy",
            latency_ms=(time.time() - start) * 1000,
            message="Database not reachable",
        )
    return ComponentHealth(name=name, status="healthy", latency_ms=(time.time() - start) * 1000)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    template_store: TemplateStoreDep,
    deployment_store: DeploymentStoreDep,
    provisioning: ProvisioningClientDep,
) -> HealthResponse:
    """Check service health status.

    The provisioning client is reported but not called; a health probe
    must not depend on the external API.
    """
    logger.debug("health_check_request")

    components = [
        await _check_store_health(template_store, "template_store"),
        await _check_store_health(deployment_store, "deployment_store"),
        ComponentHealth(
            name="provisioning",
            status="healthy",
            message=type(provisioning).__name__,
        ),
    ]

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


@router.get("/metrics")
async def get_metrics() -> Response:
    """Get Prometheus metrics in text format for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
