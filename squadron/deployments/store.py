"""DeploymentStore abstract interface."""

from abc import ABC, abstractmethod

from squadron.deployments.models import Deployment, Transition


class DeploymentStore(ABC):
    """Abstract interface for deployment records and their history.

    History is append-only. The only way to add a transition is
    commit_transition, which updates the deployment's current fields and
    appends the transition as a single atomic write.
    """

    @abstractmethod
    async def get_deployment(self, account_id: str) -> Deployment | None:
        """Get a deployment with its full history."""
        pass

    @abstractmethod
    async def list_deployments(self) -> list[Deployment]:
        """List every deployment record."""
        pass

    @abstractmethod
    async def save_deployment(self, deployment: Deployment) -> None:
        """Insert or update a deployment's current fields.

        History is never written through this method.
        """
        pass

    @abstractmethod
    async def commit_transition(
        self, deployment: Deployment, transition: Transition
    ) -> Deployment:
        """Atomically save the deployment's current fields and append a transition.

        Args:
            deployment: Deployment with current fields already updated
            transition: Transition to append to history

        Returns:
            The stored deployment including the new transition
        """
        pass
