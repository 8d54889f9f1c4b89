"""Template comparison for upgrade previews.

Compares two template versions member by member and produces a
MigrationReport. The report is advisory: it never blocks an upgrade,
it tells the operator what the tenants will notice.

Severity rules:
- a removed member is breaking (handoffs that reference it stop working)
- an added member is informational
- a changed tool group or model is a warning
- a changed voice is informational
- changed handoff destinations are a warning when any were removed,
  informational when they were only added
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from squadron.templates.models import Template


class ChangeType(str, Enum):
    """Kind of difference between two template versions."""

    MEMBER_REMOVED = "member_removed"
    MEMBER_ADDED = "member_added"
    TOOL_GROUP_CHANGED = "tool_group_changed"
    MODEL_CHANGED = "model_changed"
    VOICE_CHANGED = "voice_changed"
    DESTINATION_CHANGED = "destination_changed"


class Severity(str, Enum):
    """How much a change matters to a live tenant."""

    INFO = "info"
    WARNING = "warning"
    BREAKING = "breaking"


class MigrationWarning(BaseModel):
    """A single difference found between two templates."""

    model_config = ConfigDict(frozen=True)

    type: ChangeType
    severity: Severity
    member: str | None = Field(default=None, description="Affected member name")
    message: str


class MigrationReport(BaseModel):
    """Advisory diff between a tenant's current template and an upgrade target."""

    from_version: str
    to_version: str
    added_members: list[str] = Field(default_factory=list)
    removed_members: list[str] = Field(default_factory=list)
    changed_flags: list[MigrationWarning] = Field(default_factory=list)
    has_breaking_changes: bool = False
    summary: str = ""


def compare_templates(old: Template, new: Template) -> MigrationReport:
    """Compare two templates and describe what changes for a tenant.

    Args:
        old: Template currently deployed
        new: Upgrade target

    Returns:
        MigrationReport with warnings ordered removals, additions, then
        per-member changes in the new template's member order
    """
    warnings: list[MigrationWarning] = []

    old_names = old.member_names()
    new_names = new.member_names()
    removed = [name for name in old_names if name not in new_names]
    added = [name for name in new_names if name not in old_names]

    for name in removed:
        warnings.append(
            MigrationWarning(
                type=ChangeType.MEMBER_REMOVED,
                severity=Severity.BREAKING,
                member=name,
                message=(
                    f'Assistant "{name}" was removed. '
                    "Existing handoff destinations referencing it will break."
                ),
            )
        )

    for name in added:
        warnings.append(
            MigrationWarning(
                type=ChangeType.MEMBER_ADDED,
                severity=Severity.INFO,
                member=name,
                message=f'New assistant "{name}" added.',
            )
        )

    for new_member in new.member_configs:
        old_member = old.get_member(new_member.name)
        if old_member is None:
            continue
        name = new_member.name

        if old_member.tool_group != new_member.tool_group:
            warnings.append(
                MigrationWarning(
                    type=ChangeType.TOOL_GROUP_CHANGED,
                    severity=Severity.WARNING,
                    member=name,
                    message=(
                        f'Tool group changed from "{old_member.tool_group}" '
                        f'to "{new_member.tool_group}" for "{name}".'
                    ),
                )
            )

        old_model, new_model = old_member.model, new_member.model
        if (old_model.provider, old_model.model) != (new_model.provider, new_model.model):
            warnings.append(
                MigrationWarning(
                    type=ChangeType.MODEL_CHANGED,
                    severity=Severity.WARNING,
                    member=name,
                    message=(
                        f"Model changed from {old_model.provider}/{old_model.model} "
                        f'to {new_model.provider}/{new_model.model} for "{name}".'
                    ),
                )
            )

        if old_member.voice.voice_id != new_member.voice.voice_id:
            warnings.append(
                MigrationWarning(
                    type=ChangeType.VOICE_CHANGED,
                    severity=Severity.INFO,
                    member=name,
                    message=(
                        f'Voice changed for "{name}" '
                        f"({old_member.voice.voice_id} -> {new_member.voice.voice_id})."
                    ),
                )
            )

        removed_dests = [d for d in old_member.destinations if d not in new_member.destinations]
        added_dests = [d for d in new_member.destinations if d not in old_member.destinations]
        if removed_dests or added_dests:
            parts = []
            if removed_dests:
                parts.append(f"removed: {', '.join(removed_dests)}")
            if added_dests:
                parts.append(f"added: {', '.join(added_dests)}")
            warnings.append(
                MigrationWarning(
                    type=ChangeType.DESTINATION_CHANGED,
                    severity=Severity.WARNING if removed_dests else Severity.INFO,
                    member=name,
                    message=f'Handoff destinations changed for "{name}": {"; ".join(parts)}.',
                )
            )

    has_breaking = any(w.severity == Severity.BREAKING for w in warnings)

    return MigrationReport(
        from_version=old.version,
        to_version=new.version,
        added_members=added,
        removed_members=removed,
        changed_flags=warnings,
        has_breaking_changes=has_breaking,
        summary=_summarize(warnings, has_breaking),
    )


def is_additive_upgrade(old: Template, new: Template) -> bool:
    """True if every member of the old template survives in the new one."""
    new_names = set(new.member_names())
    return all(name in new_names for name in old.member_names())


def _summarize(warnings: list[MigrationWarning], has_breaking: bool) -> str:
    if not warnings:
        return "No changes detected between versions."

    if has_breaking:
        breaking = sum(1 for w in warnings if w.severity == Severity.BREAKING)
        return f"{breaking} breaking change(s) detected. Review carefully before upgrading."

    warning_count = sum(1 for w in warnings if w.severity == Severity.WARNING)
    info_count = sum(1 for w in warnings if w.severity == Severity.INFO)
    return f"{warning_count} warning(s), {info_count} info note(s). No breaking changes."
