"""Template registry: versioned squad templates, diffing and payload building."""

from squadron.templates.models import MemberConfig, ModelSettings, Template, VoiceSettings

__all__ = ["MemberConfig", "ModelSettings", "Template", "VoiceSettings"]
