"""Bulk upgrade endpoints."""

from fastapi import APIRouter

from squadron.api.dependencies import PlannerDep
from squadron.api.models.lifecycle import BulkUpgradeRequest
from squadron.lifecycle.models import UpgradeFilter, UpgradePlan
from squadron.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/upgrades")


@router.post("/plan", response_model=UpgradePlan)
async def plan_bulk_upgrade(
    request: BulkUpgradeRequest,
    planner: PlannerDep,
) -> UpgradePlan:
    """Plan a bulk upgrade; run it when dry_run is false.

    Per-account failures are reported in the plan entries, never as an
    error response.
    """
    logger.info(
        "bulk_upgrade_request",
        target_template_id=request.target_template_id,
        accounts=len(request.account_ids) if request.account_ids is not None else None,
        from_version=request.from_version,
        force=request.force,
        dry_run=request.dry_run,
    )

    return await planner.plan_bulk_upgrade(
        request.target_template_id,
        UpgradeFilter(account_ids=request.account_ids, from_version=request.from_version),
        force=request.force,
        dry_run=request.dry_run,
        actor=request.actor,
    )
