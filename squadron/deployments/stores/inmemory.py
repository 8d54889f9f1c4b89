"""In-memory implementation of DeploymentStore."""

import asyncio

from squadron.db.errors import ConflictError
from squadron.deployments.models import Deployment, Transition, utc_now
from squadron.deployments.store import DeploymentStore


class InMemoryDeploymentStore(DeploymentStore):
    """In-memory implementation of DeploymentStore for testing and development.

    Reads return deep copies so callers cannot mutate stored history.
    """

    def __init__(self) -> None:
        self._deployments: dict[str, Deployment] = {}
        self._lock = asyncio.Lock()

    async def get_deployment(self, account_id: str) -> Deployment | None:
        deployment = self._deployments.get(account_id)
        return deployment.model_copy(deep=True) if deployment else None

    async def list_deployments(self) -> list[Deployment]:
        return [d.model_copy(deep=True) for d in self._deployments.values()]

    async def save_deployment(self, deployment: Deployment) -> None:
        async with self._lock:
            existing = self._deployments.get(deployment.account_id)
            history = list(existing.history) if existing else []
            self._deployments[deployment.account_id] = deployment.model_copy(
                update={"history": history, "updated_at": utc_now()}, deep=True
            )

    async def commit_transition(
        self, deployment: Deployment, transition: Transition
    ) -> Deployment:
        async with self._lock:
            existing = self._deployments.get(deployment.account_id)
            history = list(existing.history) if existing else []
            if any(t.id == transition.id for t in history):
                raise ConflictError(f"Transition already recorded: {transition.id}")

            stored = deployment.model_copy(
                update={"history": [*history, transition], "updated_at": utc_now()},
                deep=True,
            )
            self._deployments[deployment.account_id] = stored
            return stored.model_copy(deep=True)
