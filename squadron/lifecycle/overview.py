"""Version overview: which template version every tenant is running."""

from functools import cmp_to_key

from squadron.deployments.store import DeploymentStore
from squadron.lifecycle.models import (
    AccountVersion,
    OverviewStats,
    VersionGroup,
    VersionOverview,
)
from squadron.observability.logging import get_logger
from squadron.templates.registry import TemplateRegistry
from squadron.templates.versioning import compare_versions

logger = get_logger(__name__)

UNVERSIONED = "unversioned"


class VersionOverviewService:
    """Builds the cross-tenant version overview."""

    def __init__(self, registry: TemplateRegistry, deployments: DeploymentStore) -> None:
        self._registry = registry
        self._deployments = deployments

    async def overview(self, category: str | None = None) -> VersionOverview:
        """Summarize deployed versions across tenants.

        Args:
            category: Only include tenants whose template is in this category

        Returns:
            VersionOverview with per-account rows, version groups and totals
        """
        default = await self._registry.get_default(category)
        builtin = self._registry.get_builtin()
        accounts: list[AccountVersion] = []

        for deployment in await self._deployments.list_deployments():
            template_category: str | None = None
            if deployment.current_template_id is not None:
                template = await self._registry.get_template(deployment.current_template_id)
                template_category = template.category if template else None
            elif deployment.has_resource:
                template_category = builtin.category

            if category is not None and template_category != category:
                continue

            last = deployment.last_transition
            accounts.append(
                AccountVersion(
                    account_id=deployment.account_id,
                    template_id=deployment.current_template_id,
                    template_name=deployment.current_template_name,
                    version=deployment.current_version,
                    category=template_category,
                    has_resource=deployment.has_resource,
                    upgrade_count=len(deployment.history),
                    last_upgrade_at=last.timestamp if last else None,
                    last_upgrade_by=last.actor if last else None,
                    is_on_latest_default=(
                        default is not None and deployment.current_template_id == default.id
                    ),
                )
            )

        groups: dict[str, list[str]] = {}
        for account in accounts:
            if account.has_resource:
                groups.setdefault(account.version or UNVERSIONED, []).append(account.account_id)

        version_groups = [
            VersionGroup(version=version, count=len(ids), account_ids=sorted(ids))
            for version, ids in groups.items()
        ]
        version_groups.sort(key=cmp_to_key(_newest_first))

        with_resource = sum(1 for a in accounts if a.has_resource)
        stats = OverviewStats(
            total_accounts=len(accounts),
            with_resource=with_resource,
            without_resource=len(accounts) - with_resource,
            on_latest_default=sum(1 for a in accounts if a.is_on_latest_default),
            unique_versions=len(groups),
        )

        logger.debug("version_overview_built", category=category, **stats.model_dump())
        return VersionOverview(
            accounts=accounts,
            version_groups=version_groups,
            default_template_id=default.id if default else None,
            default_version=default.version if default else None,
            stats=stats,
        )


def _newest_first(left: VersionGroup, right: VersionGroup) -> int:
    if left.version == right.version:
        return 0
    if left.version == UNVERSIONED:
        return 1
    if right.version == UNVERSIONED:
        return -1
    return -compare_versions(left.version, right.version)
