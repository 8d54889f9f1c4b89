"""Version overview endpoint."""

from fastapi import APIRouter, Query

from squadron.api.dependencies import OverviewServiceDep
from squadron.lifecycle.models import VersionOverview

router = APIRouter(prefix="/versions")


@router.get("/overview", response_model=VersionOverview)
async def get_version_overview(
    service: OverviewServiceDep,
    category: str | None = Query(default=None),
) -> VersionOverview:
    """Which version is every account on."""
    return await service.overview(category)
