"""PostgreSQL implementation of DeploymentStore.

Deployments live in `deployments`; their history lives in
`deployment_transitions`, ordered by a per-account position. A transition
and the deployment update it causes are written in one transaction.
"""

from typing import Any

import asyncpg

from squadron.db.errors import ConflictError, ConnectionError, StoreError
from squadron.db.pool import PostgresPool
from squadron.deployments.models import Deployment, Transition
from squadron.deployments.store import DeploymentStore
from squadron.observability.logging import get_logger

logger = get_logger(__name__)

_UPSERT_DEPLOYMENT = """
    INSERT INTO deployments (
        account_id, current_template_id, current_template_name, current_version,
        external_resource_id, deleted_resource_id, routing_binding_id,
        created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, NOW())
    ON CONFLICT (account_id) DO UPDATE SET
        current_template_id = EXCLUDED.current_template_id,
        current_template_name = EXCLUDED.current_template_name,
        current_version = EXCLUDED.current_version,
        external_resource_id = EXCLUDED.external_resource_id,
        deleted_resource_id = EXCLUDED.deleted_resource_id,
        routing_binding_id = EXCLUDED.routing_binding_id,
        updated_at = NOW()
"""

_SELECT_DEPLOYMENT = """
    SELECT account_id, current_template_id, current_template_name, current_version,
           external_resource_id, deleted_resource_id, routing_binding_id,
           created_at, updated_at
    FROM deployments
"""

_INSERT_TRANSITION = """
    INSERT INTO deployment_transitions (
        id, account_id, position, from_version, from_template_name,
        to_version, to_template_name, to_template_id,
        old_resource_id, new_resource_id, actor,
        is_rollback, delete_failed, created_at
    ) VALUES (
        $1, $2,
        (SELECT COALESCE(MAX(position), 0) + 1
         FROM deployment_transitions WHERE account_id = $2),
        $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13
    )
"""

_SELECT_TRANSITIONS = """
    SELECT id, account_id, from_version, from_template_name, to_version,
           to_template_name, to_template_id, old_resource_id, new_resource_id,
           actor, is_rollback, delete_failed, created_at
    FROM deployment_transitions
"""


class PostgresDeploymentStore(DeploymentStore):
    """PostgreSQL implementation of DeploymentStore."""

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize with connection pool.

        Args:
            pool: PostgreSQL connection pool
        """
        self._pool = pool

    async def get_deployment(self, account_id: str) -> Deployment | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(f"{_SELECT_DEPLOYMENT} WHERE account_id = $1", account_id)
                if row is None:
                    return None
                transitions = await conn.fetch(
                    f"{_SELECT_TRANSITIONS} WHERE account_id = $1 ORDER BY position ASC",
                    account_id,
                )
                return self._row_to_deployment(row, transitions)
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_get_deployment_error", account_id=account_id, error=str(e))
            raise ConnectionError(f"Failed to get deployment: {e}", cause=e) from e

    async def list_deployments(self) -> list[Deployment]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(f"{_SELECT_DEPLOYMENT} ORDER BY account_id")
                transitions = await conn.fetch(
                    f"{_SELECT_TRANSITIONS} ORDER BY account_id, position ASC"
                )
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_list_deployments_error", error=str(e))
            raise ConnectionError(f"Failed to list deployments: {e}", cause=e) from e

        by_account: dict[str, list[Any]] = {}
        for transition in transitions:
            by_account.setdefault(transition["account_id"], []).append(transition)
        return [self._row_to_deployment(row, by_account.get(row["account_id"], [])) for row in rows]

    async def save_deployment(self, deployment: Deployment) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(_UPSERT_DEPLOYMENT, *self._deployment_params(deployment))
                logger.debug("deployment_saved", account_id=deployment.account_id)
        except StoreError:
            raise
        except Exception as e:
            logger.error(
                "postgres_save_deployment_error", account_id=deployment.account_id, error=str(e)
            )
            raise ConnectionError(f"Failed to save deployment: {e}", cause=e) from e

    async def commit_transition(
        self, deployment: Deployment, transition: Transition
    ) -> Deployment:
        async def write(conn: asyncpg.Connection) -> None:
            await conn.execute(_UPSERT_DEPLOYMENT, *self._deployment_params(deployment))
            # Row lock serializes concurrent appends for the same account.
            await conn.execute(
                "SELECT 1 FROM deployments WHERE account_id = $1 FOR UPDATE",
                deployment.account_id,
            )
            await conn.execute(_INSERT_TRANSITION, *self._transition_params(transition))

        try:
            await self._pool.run_in_transaction(write)
        except ConflictError as e:
            raise ConflictError(
                f"Transition already recorded: {transition.id}", cause=e.cause
            ) from e
        except StoreError:
            raise
        except Exception as e:
            logger.error(
                "postgres_commit_transition_error",
                account_id=deployment.account_id,
                error=str(e),
            )
            raise ConnectionError(f"Failed to commit transition: {e}", cause=e) from e

        logger.debug(
            "transition_committed",
            account_id=deployment.account_id,
            transition_id=transition.id,
        )
        stored = await self.get_deployment(deployment.account_id)
        if stored is None:
            raise ConnectionError(f"Deployment vanished after commit: {deployment.account_id}")
        return stored

    def _transition_params(self, transition: Transition) -> tuple[Any, ...]:
        return (
            transition.id,
            transition.account_id,
            transition.from_version,
            transition.from_template_name,
            transition.to_version,
            transition.to_template_name,
            transition.to_template_id,
            transition.old_resource_id,
            transition.new_resource_id,
            transition.actor,
            transition.is_rollback,
            transition.delete_failed,
            transition.timestamp,
        )

    def _deployment_params(self, deployment: Deployment) -> tuple[Any, ...]:
        return (
            deployment.account_id,
            deployment.current_template_id,
            deployment.current_template_name,
            deployment.current_version,
            deployment.external_resource_id,
            deployment.deleted_resource_id,
            deployment.routing_binding_id,
            deployment.created_at,
        )

    def _row_to_deployment(self, row: Any, transitions: list[Any]) -> Deployment:
        return Deployment(
            account_id=row["account_id"],
            current_template_id=row["current_template_id"],
            current_template_name=row["current_template_name"],
            current_version=row["current_version"],
            external_resource_id=row["external_resource_id"],
            deleted_resource_id=row["deleted_resource_id"],
            routing_binding_id=row["routing_binding_id"],
            history=[self._row_to_transition(t) for t in transitions],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_transition(self, row: Any) -> Transition:
        return Transition(
            id=row["id"],
            account_id=row["account_id"],
            from_version=row["from_version"],
            from_template_name=row["from_template_name"],
            to_version=row["to_version"],
            to_template_name=row["to_template_name"],
            to_template_id=row["to_template_id"],
            old_resource_id=row["old_resource_id"],
            new_resource_id=row["new_resource_id"],
            actor=row["actor"],
            is_rollback=row["is_rollback"],
            delete_failed=row["delete_failed"],
            timestamp=row["created_at"],
        )
