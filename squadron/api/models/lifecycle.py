"""Request and response models for lifecycle endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from squadron.deployments.models import Transition
from squadron.lifecycle.models import ResolutionReason
from squadron.templates.models import MemberConfig, Template


# Deployment models
class DeploymentResponse(BaseModel):
    """Current deployment state for an account."""

    account_id: str
    current_template_id: str | None
    current_template_name: str | None
    current_version: str | None
    external_resource_id: str | None
    deleted_resource_id: str | None
    routing_binding_id: str | None
    transition_count: int
    last_transition: Transition | None
    updated_at: datetime


class ExecuteUpgradeRequest(BaseModel):
    """Request to swap one account to a template.

    Without a target the account is redeployed with its effective template.
    """

    target_template_id: str | None = Field(default=None)
    actor: str | None = Field(default=None, max_length=255)


class ExecuteUpgradeResponse(BaseModel):
    """Result of a single-account swap."""

    transition: Transition
    resolution_reason: ResolutionReason


# Bulk upgrade models
class BulkUpgradeRequest(BaseModel):
    """Request to plan (and optionally run) a bulk upgrade."""

    target_template_id: str = Field(..., min_length=1)
    account_ids: list[str] | None = Field(default=None)
    from_version: str | None = Field(default=None)
    force: bool = Field(default=False, description="Redeploy accounts already on the target")
    dry_run: bool = Field(default=True, description="Plan only, touch nothing")
    actor: str | None = Field(default=None, max_length=255)


# Rollback models
class RollbackRequest(BaseModel):
    """Request to roll back one or more accounts."""

    account_ids: list[str] = Field(..., min_length=1)
    target_template_id: str | None = Field(default=None)
    use_built_in: bool = Field(default=False)
    actor: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def check_single_target(self) -> "RollbackRequest":
        """An explicit template and use_built_in are mutually exclusive."""
        if self.target_template_id is not None and self.use_built_in:
            raise ValueError("Specify target_template_id or use_built_in, not both")
        return self


# Template models
class TemplateSummary(BaseModel):
    """Template without member configs."""

    id: str
    name: str
    version: str
    display_name: str
    category: str
    is_active: bool
    is_default: bool
    is_builtin: bool
    member_count: int
    created_at: datetime

    @classmethod
    def from_template(cls, template: Template) -> "TemplateSummary":
        """Build a summary from a template."""
        return cls(
            id=template.id,
            name=template.name,
            version=template.version,
            display_name=template.display_name,
            category=template.category,
            is_active=template.is_active,
            is_default=template.is_default,
            is_builtin=template.is_builtin,
            member_count=len(template.member_configs),
            created_at=template.created_at,
        )


class TemplateCreate(BaseModel):
    """Request model for importing a template."""

    name: str = Field(..., min_length=1, max_length=255)
    version: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(default="dental-clinic", max_length=100)
    description: str | None = Field(default=None)
    is_active: bool = Field(default=True)
    is_default: bool = Field(default=False)
    member_configs: list[MemberConfig] = Field(..., min_length=1)


class TemplateActivationUpdate(BaseModel):
    """Request model for activating or deactivating a template."""

    is_active: bool


class EffectiveTemplateResponse(BaseModel):
    """The template an account should be running and why."""

    account_id: str
    template: TemplateSummary
    reason: ResolutionReason
