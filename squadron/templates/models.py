"""Template domain models.

A template is an immutable, versioned description of a squad: an ordered
list of member assistants with their prompts, model and voice settings,
tool group and handoff destinations. The lifecycle core treats member
configs as opaque; only the diff and the payload builder read them.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ModelSettings(BaseModel):
    """LLM settings for one squad member."""

    model_config = ConfigDict(frozen=True)

    provider: str = Field(default="openai", description="LLM provider")
    model: str = Field(default="gpt-4o", description="Model name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=400, gt=0)


class VoiceSettings(BaseModel):
    """Voice settings for one squad member."""

    model_config = ConfigDict(frozen=True)

    provider: str = Field(default="openai", description="Voice provider")
    voice_id: str = Field(default="nova", description="Provider voice identifier")


class MemberConfig(BaseModel):
    """One assistant in a squad template."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Assistant name, unique in the squad")
    system_prompt: str = Field(default="", description="Prompt with {{placeholder}} slots")
    first_message: str = Field(default="", description="Opening line, empty for model-generated")
    tool_group: str = Field(default="none", description="Tool group key resolved at build time")
    model: ModelSettings = Field(default_factory=ModelSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    destinations: list[str] = Field(
        default_factory=list,
        description="Names of members this assistant can hand off to",
    )
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific assistant settings passed through verbatim",
    )


class Template(BaseModel):
    """Immutable, versioned squad configuration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Template identifier")
    name: str = Field(..., min_length=1, description="Unique template name")
    version: str = Field(..., min_length=1, description="Version label, e.g. v1.2")
    display_name: str = Field(..., description="Human-readable squad name")
    category: str = Field(default="general", description="Template family, e.g. dental-clinic")
    description: str | None = Field(default=None)
    is_active: bool = Field(default=True, description="Inactive templates cannot be deployed")
    is_default: bool = Field(default=False, description="Default template for its category")
    is_builtin: bool = Field(default=False, description="Compiled into the service")
    member_configs: list[MemberConfig] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    def member_names(self) -> list[str]:
        """Names of the squad members in template order."""
        return [member.name for member in self.member_configs]

    def get_member(self, name: str) -> MemberConfig | None:
        """Look up a member by name."""
        for member in self.member_configs:
            if member.name == name:
                return member
        return None
