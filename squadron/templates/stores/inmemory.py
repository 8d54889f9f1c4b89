"""In-memory implementation of TemplateStore."""

from squadron.db.errors import ConflictError
from squadron.templates.models import Template
from squadron.templates.store import TemplateStore


class InMemoryTemplateStore(TemplateStore):
    """In-memory implementation of TemplateStore for testing and development.

    Uses simple dict storage with linear scan for queries.
    """

    def __init__(self) -> None:
        self._templates: dict[str, Template] = {}

    async def get_template(self, template_id: str) -> Template | None:
        return self._templates.get(template_id)

    async def get_latest_by_name(self, name: str) -> Template | None:
        matches = [t for t in self._templates.values() if t.name == name]
        if not matches:
            return None
        return max(matches, key=lambda t: t.created_at)

    async def list_templates(
        self,
        *,
        category: str | None = None,
        active_only: bool = False,
    ) -> list[Template]:
        results = []
        for template in self._templates.values():
            if category is not None and template.category != category:
                continue
            if active_only and not template.is_active:
                continue
            results.append(template)
        return sorted(results, key=lambda t: t.created_at, reverse=True)

    async def save_template(self, template: Template) -> str:
        for existing in self._templates.values():
            if existing.name == template.name and existing.id != template.id:
                raise ConflictError(f"Template name already exists: {template.name}")
        self._templates[template.id] = template
        return template.id
