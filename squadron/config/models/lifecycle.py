"""Template lifecycle configuration."""

from pydantic import BaseModel, Field


class LifecycleConfig(BaseModel):
    """Upgrade, rollback and bulk migration behavior."""

    built_in_wins_on_tie: bool = Field(
        default=True,
        description=(
            "When a tenant's stored template and the built-in share a version, "
            "use the built-in. A stored template must be strictly newer to win."
        ),
    )
    bulk_max_concurrency: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Maximum tenants swapped concurrently in a bulk upgrade",
    )
    default_actor: str = Field(
        default="system",
        description="Actor recorded on transitions when none is supplied",
    )
