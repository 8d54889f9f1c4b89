"""Version ledger: the append-only history of every tenant's transitions."""

from squadron.deployments.models import Deployment, Transition
from squadron.deployments.store import DeploymentStore
from squadron.lifecycle.errors import LifecycleValidationError
from squadron.observability.logging import get_logger

logger = get_logger(__name__)


class VersionLedger:
    """Append-only record of deployment transitions.

    Appending a transition also moves the deployment's current fields to
    the transition's target, in the same store write, so the last history
    entry always agrees with what the deployment says is live.
    """

    def __init__(self, store: DeploymentStore) -> None:
        self._store = store

    async def get(self, account_id: str) -> Deployment | None:
        """The deployment for an account, or None if it was never deployed."""
        return await self._store.get_deployment(account_id)

    async def load_or_create(self, account_id: str) -> Deployment:
        """Get the deployment for an account, creating an empty record if missing."""
        deployment = await self._store.get_deployment(account_id)
        if deployment is not None:
            return deployment

        deployment = Deployment(account_id=account_id)
        await self._store.save_deployment(deployment)
        logger.info("deployment_created", account_id=account_id)
        return deployment

    async def append(
        self,
        account_id: str,
        transition: Transition,
        *,
        routing_binding_id: str | None = None,
    ) -> Deployment:
        """Record a completed transition and update the live deployment.

        Args:
            account_id: Tenant the transition belongs to
            transition: Completed transition
            routing_binding_id: Binding that now points at the new resource

        Returns:
            Updated deployment including the new transition

        Raises:
            LifecycleValidationError: If the transition belongs to another account
        """
        if transition.account_id != account_id:
            raise LifecycleValidationError(
                f"Transition for {transition.account_id} appended to {account_id}"
            )

        deployment = await self.load_or_create(account_id)
        deployment.current_template_id = transition.to_template_id
        deployment.current_template_name = transition.to_template_name
        deployment.current_version = transition.to_version
        deployment.external_resource_id = transition.new_resource_id
        if transition.delete_failed:
            deployment.deleted_resource_id = transition.old_resource_id
        if routing_binding_id is not None:
            deployment.routing_binding_id = routing_binding_id

        stored = await self._store.commit_transition(deployment, transition)
        logger.info(
            "transition_recorded",
            account_id=account_id,
            transition_id=transition.id,
            from_version=transition.from_version,
            to_version=transition.to_version,
            is_rollback=transition.is_rollback,
            history_length=len(stored.history),
        )
        return stored

    async def history(self, account_id: str) -> list[Transition]:
        """All transitions for an account, oldest first."""
        deployment = await self._store.get_deployment(account_id)
        return list(deployment.history) if deployment else []

    async def last_transition(self, account_id: str) -> Transition | None:
        """Most recent transition for an account, if any."""
        deployment = await self._store.get_deployment(account_id)
        return deployment.last_transition if deployment else None
