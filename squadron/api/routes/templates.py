"""Template catalogue endpoints."""

from fastapi import APIRouter, Query

from squadron.api.dependencies import TemplateRegistryDep
from squadron.api.exceptions import TemplateNotFoundAPIError
from squadron.api.models.lifecycle import (
    TemplateActivationUpdate,
    TemplateCreate,
    TemplateSummary,
)
from squadron.observability.logging import get_logger
from squadron.templates.diff import MigrationReport, compare_templates
from squadron.templates.models import Template

logger = get_logger(__name__)

router = APIRouter(prefix="/templates")


async def _get_template_or_404(registry: TemplateRegistryDep, template_id: str) -> Template:
    template = await registry.get_template(template_id)
    if template is None:
        raise TemplateNotFoundAPIError(f"Template {template_id} not found")
    return template


@router.get("", response_model=list[TemplateSummary])
async def list_templates(
    registry: TemplateRegistryDep,
    category: str | None = Query(default=None),
    active_only: bool = Query(default=False),
    include_builtin: bool = Query(default=True),
) -> list[TemplateSummary]:
    """List templates, newest first."""
    templates = await registry.list_templates(
        category=category,
        active_only=active_only,
        include_builtin=include_builtin,
    )
    return [TemplateSummary.from_template(t) for t in templates]


@router.get("/compare", response_model=MigrationReport)
async def compare(
    registry: TemplateRegistryDep,
    from_id: str = Query(..., min_length=1),
    to_id: str = Query(..., min_length=1),
) -> MigrationReport:
    """Diff two templates member by member."""
    old = await _get_template_or_404(registry, from_id)
    new = await _get_template_or_404(registry, to_id)
    return compare_templates(old, new)


@router.get("/{template_id}", response_model=Template)
async def get_template(
    template_id: str,
    registry: TemplateRegistryDep,
) -> Template:
    """Get a template including its member configs."""
    return await _get_template_or_404(registry, template_id)


@router.post("", response_model=Template, status_code=201)
async def import_template(
    request: TemplateCreate,
    registry: TemplateRegistryDep,
) -> Template:
    """Import a new template version."""
    logger.info(
        "import_template_request",
        name=request.name,
        version=request.version,
        category=request.category,
    )

    template = Template(
        name=request.name,
        version=request.version,
        display_name=request.display_name,
        category=request.category,
        description=request.description,
        is_active=request.is_active,
        is_default=request.is_default,
        member_configs=request.member_configs,
    )
    return await registry.register(template)


@router.patch("/{template_id}/activation", response_model=Template)
async def set_activation(
    template_id: str,
    request: TemplateActivationUpdate,
    registry: TemplateRegistryDep,
) -> Template:
    """Activate or deactivate a stored template."""
    return await registry.set_active(template_id, request.is_active)
