"""Rollback endpoints."""

from fastapi import APIRouter, Query

from squadron.api.dependencies import RollbackResolverDep, RollbackServiceDep
from squadron.api.models.lifecycle import RollbackRequest, TemplateSummary
from squadron.lifecycle.models import RollbackBatch
from squadron.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/rollbacks")


@router.post("", response_model=RollbackBatch)
async def rollback_accounts(
    request: RollbackRequest,
    service: RollbackServiceDep,
) -> RollbackBatch:
    """Roll back one or more accounts, reporting each outcome."""
    logger.info(
        "rollback_request",
        accounts=len(request.account_ids),
        target_template_id=request.target_template_id,
        use_built_in=request.use_built_in,
    )
    return await service.rollback_many(
        request.account_ids,
        explicit_template_id=request.target_template_id,
        use_built_in=request.use_built_in,
        actor=request.actor,
    )


@router.get("/{account_id}/target", response_model=TemplateSummary)
async def preview_rollback_target(
    account_id: str,
    resolver: RollbackResolverDep,
    target_template_id: str | None = Query(default=None),
    use_built_in: bool = Query(default=False),
) -> TemplateSummary:
    """Show which template a rollback would return the account to."""
    template = await resolver.resolve_rollback_target(
        account_id, target_template_id, use_built_in
    )
    return TemplateSummary.from_template(template)
