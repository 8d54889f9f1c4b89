"""Deployment and transition models.

A Deployment is the per-tenant record of what is live: which template and
version, which external resource, and the append-only history of every
transition that got it there.
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Transition(BaseModel):
    """One completed move from one template version to another."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    account_id: str = Field(..., description="Tenant that transitioned")
    from_version: str | None = Field(default=None, description="Version before the swap")
    from_template_name: str | None = Field(
        default=None, description="Template name before the swap, used by rollback"
    )
    to_version: str = Field(..., description="Version after the swap")
    to_template_name: str = Field(..., description="Template name after the swap")
    to_template_id: str = Field(..., description="Template id after the swap")
    old_resource_id: str | None = Field(default=None, description="Replaced resource")
    new_resource_id: str = Field(..., description="Resource now serving the tenant")
    timestamp: datetime = Field(default_factory=utc_now)
    actor: str = Field(default="system", description="Who triggered the transition")
    is_rollback: bool = Field(default=False)
    delete_failed: bool = Field(
        default=False, description="The replaced resource could not be deleted"
    )


class Deployment(BaseModel):
    """Per-tenant deployment record.

    Created lazily on first use and never deleted. A null template id means
    the tenant implicitly runs the built-in template.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    account_id: str = Field(..., min_length=1)
    current_template_id: str | None = None
    current_template_name: str | None = None
    current_version: str | None = None
    external_resource_id: str | None = Field(
        default=None, description="Live resource in the provisioning API"
    )
    deleted_resource_id: str | None = Field(
        default=None,
        description="Replaced resource whose deletion failed and may still exist",
    )
    routing_binding_id: str | None = Field(
        default=None, description="Inbound number bound to the live resource"
    )
    history: list[Transition] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def last_transition(self) -> Transition | None:
        """Most recent transition, if any."""
        return self.history[-1] if self.history else None

    @property
    def has_resource(self) -> bool:
        """True if a live resource is recorded for this tenant."""
        return self.external_resource_id is not None
