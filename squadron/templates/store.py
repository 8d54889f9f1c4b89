"""TemplateStore abstract interface."""

from abc import ABC, abstractmethod

from squadron.templates.models import Template


class TemplateStore(ABC):
    """Abstract interface for stored (non-built-in) templates.

    Templates are immutable once published; saving an existing id only
    updates its flags (is_active, is_default).
    """

    @abstractmethod
    async def get_template(self, template_id: str) -> Template | None:
        """Get a template by ID."""
        pass

    @abstractmethod
    async def get_latest_by_name(self, name: str) -> Template | None:
        """Get the most recently created template with this name."""
        pass

    @abstractmethod
    async def list_templates(
        self,
        *,
        category: str | None = None,
        active_only: bool = False,
    ) -> list[Template]:
        """List templates, newest first."""
        pass

    @abstractmethod
    async def save_template(self, template: Template) -> str:
        """Insert or update a template, returning its ID.

        Raises:
            ConflictError: If another template already uses the name
        """
        pass
