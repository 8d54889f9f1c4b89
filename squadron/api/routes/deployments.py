"""Deployment endpoints: current state, history and single-account swaps."""

from fastapi import APIRouter, Query

from squadron.api.dependencies import (
    DeploymentStoreDep,
    OrchestratorDep,
    VersionLedgerDep,
    VersionResolverDep,
)
from squadron.api.models.lifecycle import (
    DeploymentResponse,
    EffectiveTemplateResponse,
    ExecuteUpgradeRequest,
    ExecuteUpgradeResponse,
    TemplateSummary,
)
from squadron.deployments.models import Deployment, Transition
from squadron.lifecycle.errors import AccountNotFoundError
from squadron.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/deployments")


def _map_deployment_to_response(deployment: Deployment) -> DeploymentResponse:
    return DeploymentResponse(
        account_id=deployment.account_id,
        current_template_id=deployment.current_template_id,
        current_template_name=deployment.current_template_name,
        current_version=deployment.current_version,
        external_resource_id=deployment.external_resource_id,
        deleted_resource_id=deployment.deleted_resource_id,
        routing_binding_id=deployment.routing_binding_id,
        transition_count=len(deployment.history),
        last_transition=deployment.last_transition,
        updated_at=deployment.updated_at,
    )


@router.get("/{account_id}", response_model=DeploymentResponse)
async def get_deployment(
    account_id: str,
    store: DeploymentStoreDep,
) -> DeploymentResponse:
    """Get the current deployment for an account."""
    deployment = await store.get_deployment(account_id)
    if deployment is None:
        raise AccountNotFoundError(
            f"No deployment for account {account_id}", account_id=account_id
        )
    return _map_deployment_to_response(deployment)


@router.get("/{account_id}/history", response_model=list[Transition])
async def get_history(
    account_id: str,
    store: DeploymentStoreDep,
    ledger: VersionLedgerDep,
) -> list[Transition]:
    """Get every transition for an account, oldest first."""
    if await store.get_deployment(account_id) is None:
        raise AccountNotFoundError(
            f"No deployment for account {account_id}", account_id=account_id
        )
    return await ledger.history(account_id)


@router.get("/{account_id}/effective-template", response_model=EffectiveTemplateResponse)
async def get_effective_template(
    account_id: str,
    resolver: VersionResolverDep,
    built_in_wins_on_tie: bool | None = Query(default=None),
) -> EffectiveTemplateResponse:
    """Resolve the template an account should be running."""
    resolved = await resolver.resolve_effective_template(
        account_id, built_in_wins_on_tie=built_in_wins_on_tie
    )
    return EffectiveTemplateResponse(
        account_id=account_id,
        template=TemplateSummary.from_template(resolved.template),
        reason=resolved.reason,
    )


@router.post("/{account_id}/upgrade", response_model=ExecuteUpgradeResponse)
async def execute_upgrade(
    account_id: str,
    request: ExecuteUpgradeRequest,
    resolver: VersionResolverDep,
    orchestrator: OrchestratorDep,
) -> ExecuteUpgradeResponse:
    """Swap one account to a template.

    Omitting target_template_id redeploys the account's effective template.
    """
    logger.info(
        "execute_upgrade_request",
        account_id=account_id,
        target_template_id=request.target_template_id,
    )

    resolved = await resolver.resolve_effective_template(
        account_id, request.target_template_id
    )
    transition = await orchestrator.execute(
        account_id, resolved.template, actor=request.actor
    )
    return ExecuteUpgradeResponse(transition=transition, resolution_reason=resolved.reason)
