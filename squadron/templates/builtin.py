"""Built-in squad templates compiled into the service.

The built-in dental clinic template is the fallback whenever a tenant has
no stored template, when a rollback finds no usable previous template, or
when a stored template is not newer than it.
"""

from datetime import UTC, datetime

from squadron.templates.models import MemberConfig, ModelSettings, Template, VoiceSettings

DENTAL_CLINIC_TEMPLATE_NAME = "dental-clinic"
DENTAL_CLINIC_TEMPLATE_VERSION = "v1.0"
DENTAL_CLINIC_TEMPLATE_DISPLAY_NAME = f"Dental Clinic Squad {DENTAL_CLINIC_TEMPLATE_VERSION}"
BUILTIN_ID_PREFIX = "builtin:"

_TRIAGE_PROMPT = """\
You are the friendly receptionist at {{clinicName}}. Your only job is to
understand why the caller is calling and route them to the right team.

ROUTING
- EMERGENCIES (severe pain, swelling, bleeding, trauma) -> "Emergency Transfer"
- CLINIC QUESTIONS (services, providers, hours, location, insurance, policies) -> "Clinic Information"
- APPOINTMENTS (book, cancel, reschedule, confirm) -> "Scheduling"

Never mention transfers or team names. Say something brief and natural, then hand off."""

_EMERGENCY_PROMPT = """\
You handle urgent dental situations for {{clinicName}}. Stay calm and reassuring.
Assess severity in one or two questions. Life-threatening symptoms (difficulty
breathing, uncontrolled bleeding, facial swelling affecting the eyes or throat)
mean the caller must call 911 immediately. Otherwise offer the earliest
emergency appointment. Clinic hours: {{clinicHours}}."""

_CLINIC_INFO_PROMPT = """\
You are the clinic information specialist at {{clinicName}}. Answer questions
about the clinic accurately and briefly.

Location: {{clinicLocation}}
Hours: {{clinicHours}}
Services: {{clinicServices}}
Insurance: {{clinicInsurance}}

If you do not know an answer, say so and offer to have the clinic follow up."""

_SCHEDULING_PROMPT = """\
You manage appointments for {{clinicName}}. Find the patient, check availability,
and book, cancel or reschedule. Always confirm the type, provider, date and time
back to the caller before booking. Clinic hours: {{clinicHours}}."""


def get_dental_clinic_template() -> Template:
    """Return the built-in dental clinic squad template."""
    return Template(
        id=f"{BUILTIN_ID_PREFIX}{DENTAL_CLINIC_TEMPLATE_NAME}",
        name=DENTAL_CLINIC_TEMPLATE_NAME,
        version=DENTAL_CLINIC_TEMPLATE_VERSION,
        display_name=DENTAL_CLINIC_TEMPLATE_DISPLAY_NAME,
        category="dental-clinic",
        description="Four-assistant dental clinic squad: triage, emergency, clinic info, scheduling",
        is_active=True,
        is_default=False,
        is_builtin=True,
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
        member_configs=[
            MemberConfig(
                name="Triage Receptionist",
                system_prompt=_TRIAGE_PROMPT,
                first_message="Thank you for calling {{clinicName}}! How can I help you today?",
                tool_group="none",
                model=ModelSettings(temperature=0.7, max_tokens=300),
                voice=VoiceSettings(provider="11labs", voice_id="21m00Tcm4TlvDq8ikWAM"),
                destinations=["Emergency Transfer", "Clinic Information", "Scheduling"],
            ),
            MemberConfig(
                name="Emergency Transfer",
                system_prompt=_EMERGENCY_PROMPT,
                tool_group="emergency",
                model=ModelSettings(temperature=0.3, max_tokens=250),
                voice=VoiceSettings(provider="11labs", voice_id="pNInz6obpgDQGcFmaJgB"),
                destinations=["Scheduling"],
            ),
            MemberConfig(
                name="Clinic Information",
                system_prompt=_CLINIC_INFO_PROMPT,
                tool_group="clinicInfo",
                model=ModelSettings(temperature=0.7, max_tokens=400),
                voice=VoiceSettings(provider="11labs", voice_id="EXAVITQu4vr4xnSDxMaL"),
                destinations=["Scheduling", "Emergency Transfer", "Triage Receptionist"],
            ),
            MemberConfig(
                name="Scheduling",
                system_prompt=_SCHEDULING_PROMPT,
                tool_group="scheduling",
                model=ModelSettings(temperature=0.7, max_tokens=400),
                voice=VoiceSettings(provider="11labs", voice_id="EXAVITQu4vr4xnSDxMaL"),
                destinations=["Triage Receptionist", "Emergency Transfer", "Clinic Information"],
            ),
        ],
    )


BUILTIN_TEMPLATES: dict[str, Template] = {
    DENTAL_CLINIC_TEMPLATE_NAME: get_dental_clinic_template(),
}


def get_builtin_template(name: str = DENTAL_CLINIC_TEMPLATE_NAME) -> Template:
    """Return a built-in template by name.

    Raises:
        KeyError: If no built-in template has that name
    """
    return BUILTIN_TEMPLATES[name]


def is_builtin_id(template_id: str) -> bool:
    """True if the id refers to a compiled-in template."""
    return template_id.startswith(BUILTIN_ID_PREFIX)
