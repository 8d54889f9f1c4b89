"""Version resolver: picks the template a tenant should be running."""

from dataclasses import dataclass

from squadron.config.models.lifecycle import LifecycleConfig
from squadron.deployments.ledger import VersionLedger
from squadron.lifecycle.models import ResolutionReason
from squadron.observability.logging import get_logger
from squadron.templates.models import Template
from squadron.templates.registry import TemplateRegistry
from squadron.templates.versioning import is_newer, same_version

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedTemplate:
    """A resolved template and why it was chosen."""

    template: Template
    reason: ResolutionReason


class VersionResolver:
    """Chooses between a tenant's stored template and the built-in.

    Resolution order:
    1. An explicit template id always wins (it must exist and be active).
    2. A linked, active stored template wins if it is newer than the
       built-in, or equal when built_in_wins_on_tie is False.
    3. Otherwise the built-in.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        ledger: VersionLedger,
        config: LifecycleConfig | None = None,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._config = config or LifecycleConfig()

    async def resolve_effective_template(
        self,
        account_id: str,
        explicit_template_id: str | None = None,
        *,
        built_in_wins_on_tie: bool | None = None,
    ) -> ResolvedTemplate:
        """Resolve the template a tenant should be deployed with.

        Args:
            account_id: Tenant to resolve for
            explicit_template_id: Template requested by the caller
            built_in_wins_on_tie: Tie-break between equal versions; defaults
                to the configured value

        Returns:
            ResolvedTemplate with the chosen template and reason

        An account that was never deployed resolves to the built-in and no
        record is created for it.

        Raises:
            TemplateNotFoundError: If the explicit template does not exist
            TemplateInactiveError: If the explicit template is inactive
        """
        if explicit_template_id is not None:
            template = await self._registry.get_deployable(explicit_template_id)
            return ResolvedTemplate(template=template, reason=ResolutionReason.EXPLICIT)

        if built_in_wins_on_tie is None:
            built_in_wins_on_tie = self._config.built_in_wins_on_tie

        builtin = self._registry.get_builtin()
        deployment = await self._ledger.get(account_id)
        linked_id = deployment.current_template_id if deployment else None

        if linked_id is None or linked_id == builtin.id:
            return ResolvedTemplate(template=builtin, reason=ResolutionReason.BUILT_IN)

        stored = await self._registry.get_template(linked_id)
        if stored is None or not stored.is_active:
            logger.warning(
                "linked_template_unusable",
                account_id=account_id,
                template_id=linked_id,
                missing=stored is None,
            )
            return ResolvedTemplate(template=builtin, reason=ResolutionReason.BUILT_IN)

        tied = same_version(stored.version, builtin.version)
        if is_newer(stored.version, builtin.version) or (tied and not built_in_wins_on_tie):
            return ResolvedTemplate(template=stored, reason=ResolutionReason.DB_NEWER)

        logger.debug(
            "builtin_preferred",
            account_id=account_id,
            stored_version=stored.version,
            builtin_version=builtin.version,
        )
        return ResolvedTemplate(template=builtin, reason=ResolutionReason.BUILT_IN)
