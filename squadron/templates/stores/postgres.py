"""PostgreSQL implementation of TemplateStore.

Uses asyncpg for async database access. Member configs are stored as JSONB.
"""

import json
from typing import Any

from squadron.db.errors import ConflictError, ConnectionError, StoreError
from squadron.db.pool import PostgresPool
from squadron.observability.logging import get_logger
from squadron.templates.models import MemberConfig, Template
from squadron.templates.store import TemplateStore

logger = get_logger(__name__)

_COLUMNS = """
    id, name, version, display_name, category, description,
    is_active, is_default, member_configs, created_at
"""


class PostgresTemplateStore(TemplateStore):
    """PostgreSQL implementation of TemplateStore."""

    def __init__(self, pool: PostgresPool) -> None:
        """Initialize with connection pool.

        Args:
            pool: PostgreSQL connection pool
        """
        self._pool = pool

    async def get_template(self, template_id: str) -> Template | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM agent_templates WHERE id = $1",
                    template_id,
                )
                return self._row_to_template(row) if row else None
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_get_template_error", template_id=template_id, error=str(e))
            raise ConnectionError(f"Failed to get template: {e}", cause=e) from e

    async def get_latest_by_name(self, name: str) -> Template | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS} FROM agent_templates
                    WHERE name = $1
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    name,
                )
                return self._row_to_template(row) if row else None
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_get_template_by_name_error", name=name, error=str(e))
            raise ConnectionError(f"Failed to get template by name: {e}", cause=e) from e

    async def list_templates(
        self,
        *,
        category: str | None = None,
        active_only: bool = False,
    ) -> list[Template]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM agent_templates
                    WHERE ($1::text IS NULL OR category = $1)
                      AND (NOT $2 OR is_active)
                    ORDER BY created_at DESC
                    """,
                    category,
                    active_only,
                )
                return [self._row_to_template(row) for row in rows]
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_list_templates_error", error=str(e))
            raise ConnectionError(f"Failed to list templates: {e}", cause=e) from e

    async def save_template(self, template: Template) -> str:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO agent_templates (
                        id, name, version, display_name, category, description,
                        is_active, is_default, member_configs, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                    ON CONFLICT (id) DO UPDATE SET
                        is_active = EXCLUDED.is_active,
                        is_default = EXCLUDED.is_default,
                        description = EXCLUDED.description
                    """,
                    template.id,
                    template.name,
                    template.version,
                    template.display_name,
                    template.category,
                    template.description,
                    template.is_active,
                    template.is_default,
                    json.dumps([m.model_dump(mode="json") for m in template.member_configs]),
                    template.created_at,
                )
                logger.debug("template_saved", template_id=template.id)
                return template.id
        except ConflictError as e:
            raise ConflictError(
                f"Template name already exists: {template.name}", cause=e.cause
            ) from e
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_save_template_error", template_id=template.id, error=str(e))
            raise ConnectionError(f"Failed to save template: {e}", cause=e) from e

    def _row_to_template(self, row: Any) -> Template:
        member_configs = row["member_configs"]
        if isinstance(member_configs, str):
            member_configs = json.loads(member_configs)
        return Template(
            id=row["id"],
            name=row["name"],
            version=row["version"],
            display_name=row["display_name"],
            category=row["category"],
            description=row["description"],
            is_active=row["is_active"],
            is_default=row["is_default"],
            member_configs=[MemberConfig.model_validate(m) for m in member_configs or []],
            created_at=row["created_at"],
        )
