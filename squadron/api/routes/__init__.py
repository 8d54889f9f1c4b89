"""API route registration.

This module provides helper functions for registering API routers
with the FastAPI application.
"""

from fastapi import APIRouter, FastAPI

from squadron.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes.

    Returns:
        APIRouter with all v1 routes registered
    """
    router = APIRouter(prefix="/v1")

    from squadron.api.routes.deployments import router as deployments_router
    from squadron.api.routes.reconciliation import router as reconciliation_router
    from squadron.api.routes.rollbacks import router as rollbacks_router
    from squadron.api.routes.templates import router as templates_router
    from squadron.api.routes.upgrades import router as upgrades_router
    from squadron.api.routes.versions import router as versions_router

    router.include_router(templates_router, tags=["Templates"])
    router.include_router(deployments_router, tags=["Deployments"])
    router.include_router(upgrades_router, tags=["Upgrades"])
    router.include_router(rollbacks_router, tags=["Rollbacks"])
    router.include_router(reconciliation_router, tags=["Reconciliation"])
    router.include_router(versions_router, tags=["Versions"])

    logger.debug(
        "v1_router_created",
        routes=[
            "templates",
            "deployments",
            "upgrades",
            "rollbacks",
            "reconciliation",
            "versions",
        ],
    )

    return router


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.include_router(create_v1_router())

    # Health and metrics live at root level
    from squadron.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
