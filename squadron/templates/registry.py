"""Template registry: built-in plus stored templates behind one lookup."""

from squadron.db.errors import ConflictError
from squadron.lifecycle.errors import (
    LifecycleValidationError,
    TemplateInactiveError,
    TemplateNotFoundError,
)
from squadron.observability.logging import get_logger
from squadron.templates.builtin import (
    BUILTIN_TEMPLATES,
    DENTAL_CLINIC_TEMPLATE_NAME,
    is_builtin_id,
)
from squadron.templates.models import Template
from squadron.templates.store import TemplateStore

logger = get_logger(__name__)


class TemplateRegistry:
    """Looks up templates by id or name across built-ins and the store.

    Built-in templates are compiled in and always active. Stored templates
    are immutable once registered; only their active and default flags
    change afterwards.
    """

    def __init__(
        self,
        store: TemplateStore,
        builtins: dict[str, Template] | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            store: Backing store for imported templates
            builtins: Built-in templates by name (defaults to the compiled-in set)
        """
        self._store = store
        self._builtins = dict(builtins if builtins is not None else BUILTIN_TEMPLATES)
        self._builtins_by_id = {t.id: t for t in self._builtins.values()}

    def get_builtin(self, name: str = DENTAL_CLINIC_TEMPLATE_NAME) -> Template:
        """Get a built-in template by name.

        Raises:
            TemplateNotFoundError: If no built-in template has that name
        """
        template = self._builtins.get(name)
        if template is None:
            raise TemplateNotFoundError(f"No built-in template named {name}")
        return template

    async def get_template(self, template_id: str) -> Template | None:
        """Get a built-in or stored template by id."""
        if template_id in self._builtins_by_id:
            return self._builtins_by_id[template_id]
        return await self._store.get_template(template_id)

    async def get_deployable(self, template_id: str) -> Template:
        """Get a template that may be used as a deployment target.

        Raises:
            TemplateNotFoundError: If the id does not exist
            TemplateInactiveError: If the template is deactivated
        """
        template = await self.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template not found: {template_id}")
        if not template.is_active:
            raise TemplateInactiveError(
                f"Template {template.name} ({template.version}) is inactive"
            )
        return template

    async def get_latest_by_name(self, name: str) -> Template | None:
        """Get the most recent template with this name.

        Stored templates take precedence over a built-in of the same name.
        """
        stored = await self._store.get_latest_by_name(name)
        if stored is not None:
            return stored
        return self._builtins.get(name)

    async def list_templates(
        self,
        *,
        category: str | None = None,
        active_only: bool = False,
        include_builtin: bool = True,
    ) -> list[Template]:
        """List stored templates (newest first) followed by built-ins."""
        templates = await self._store.list_templates(category=category, active_only=active_only)
        if include_builtin:
            templates.extend(
                t for t in self._builtins.values() if category is None or t.category == category
            )
        return templates

    async def get_default(self, category: str | None = None) -> Template | None:
        """Get the active default template, optionally within a category."""
        for template in await self._store.list_templates(category=category, active_only=True):
            if template.is_default:
                return template
        return None

    async def register(self, template: Template) -> Template:
        """Import a new template.

        Names are unique. Registering a default template clears the
        default flag on every other template in the same category.

        Raises:
            LifecycleValidationError: If the template is built-in, has no
                members, or its name is taken
        """
        if template.is_builtin or is_builtin_id(template.id) or template.name in self._builtins:
            raise LifecycleValidationError(
                f"Template {template.name} collides with a built-in template"
            )
        if not template.member_configs:
            raise LifecycleValidationError("Template must define at least one member")

        try:
            await self._store.save_template(template)
        except ConflictError as e:
            raise LifecycleValidationError(str(e)) from e

        if template.is_default:
            await self._clear_other_defaults(template)

        logger.info(
            "template_registered",
            template_id=template.id,
            name=template.name,
            version=template.version,
            category=template.category,
            is_default=template.is_default,
        )
        return template

    async def set_active(self, template_id: str, is_active: bool) -> Template:
        """Activate or deactivate a stored template.

        Raises:
            TemplateNotFoundError: If the template does not exist in the store
        """
        template = await self._store.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template not found: {template_id}")

        updated = template.model_copy(update={"is_active": is_active})
        await self._store.save_template(updated)
        logger.info("template_activation_changed", template_id=template_id, is_active=is_active)
        return updated

    async def _clear_other_defaults(self, template: Template) -> None:
        for other in await self._store.list_templates(category=template.category):
            if other.id != template.id and other.is_default:
                await self._store.save_template(other.model_copy(update={"is_default": False}))
