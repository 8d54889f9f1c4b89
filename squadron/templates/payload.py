"""Builds provisioning payloads from templates.

Turns a tenant-agnostic Template plus a tenant's RuntimeContext into the
JSON body the provisioning API expects for squad creation:

1. replace {{placeholder}} slots with clinic values (with defaults)
2. resolve tool groups to server-side function tools
3. attach knowledge files and the webhook server
4. add a human handoff transfer tool when the clinic number normalizes
5. tag every member with version metadata
"""

import re
from datetime import UTC, datetime
from typing import Any

from squadron.provisioning.context import RuntimeContext
from squadron.templates.models import MemberConfig, Template

DEFAULT_CLINIC_HOURS = "Contact us for current hours"
DEFAULT_CLINIC_INSURANCE = (
    "We accept most major dental insurance plans including Blue Cross Blue Shield, "
    "Aetna, Cigna, UnitedHealthcare, Medicare, and Medicaid. "
    "We also offer competitive self-pay rates."
)
DEFAULT_CLINIC_SERVICES = (
    "Full range of dental services including cleanings, exams, fillings, crowns, "
    "root canals, extractions, and cosmetic dentistry"
)

TOOL_GROUPS: dict[str, list[str]] = {
    "scheduling": [
        "searchPatients",
        "createPatient",
        "checkAvailability",
        "bookAppointment",
        "rescheduleAppointment",
        "cancelAppointment",
        "getAppointments",
        "addPatientNote",
        "getProviders",
    ],
    "emergency": [
        "searchPatients",
        "createPatient",
        "bookAppointment",
        "checkAvailability",
    ],
    "clinicInfo": [
        "searchPatients",
        "getPatientInfo",
        "getProviders",
    ],
    "none": [],
}

HUMAN_HANDOFF_PROMPT = (
    "\n\n## HUMAN HANDOFF\n"
    "If the caller asks to speak with a human at any time, use the transferCall "
    'tool immediately. Say: "Of course, one moment." and call the transferCall tool.'
)

_E164_NANP = re.compile(r"^\+1\d{10}$")
_E164_ANY = re.compile(r"^\+\d{10,15}$")
_NANP_WITH_COUNTRY = re.compile(r"^1\d{10}$")
_NANP_LOCAL = re.compile(r"^\d{10}$")
_NON_DIGIT = re.compile(r"[^\d+]")


def to_e164(raw: str) -> str | None:
    """Normalize a phone number to E.164.

    Ten-digit numbers are assumed North American.

    Returns:
        The normalized number, or None if it cannot be normalized
    """
    cleaned = _NON_DIGIT.sub("", raw)

    if _E164_NANP.match(cleaned) or _E164_ANY.match(cleaned):
        return cleaned
    if _NANP_WITH_COUNTRY.match(cleaned):
        return f"+{cleaned}"
    if _NANP_LOCAL.match(cleaned):
        return f"+1{cleaned}"
    return None


def hydrate_placeholders(text: str, context: RuntimeContext) -> str:
    """Replace known {{placeholder}} slots with clinic values.

    Unknown placeholders such as {{call.customer.number}} are left in
    place for the provisioning platform to resolve at call time.
    """
    values = {
        "clinicName": context.clinic_name,
        "clinicHours": context.clinic_hours or DEFAULT_CLINIC_HOURS,
        "clinicLocation": context.clinic_location or "",
        "clinicInsurance": context.clinic_insurance or DEFAULT_CLINIC_INSURANCE,
        "clinicServices": context.clinic_services or DEFAULT_CLINIC_SERVICES,
    }
    for key, value in values.items():
        text = text.replace("{{" + key + "}}", value)
    return text


def build_squad_payload(
    template: Template,
    context: RuntimeContext,
    *,
    deployed_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the squad creation payload for a tenant.

    Args:
        template: Template to materialize
        context: Tenant runtime context
        deployed_at: Timestamp recorded in member metadata (defaults to now)

    Returns:
        JSON-serializable payload for ProvisioningClient.create_resource
    """
    metadata: dict[str, Any] = {
        "templateId": template.id,
        "templateName": template.name,
        "templateVersion": template.version,
        "templateDisplayName": template.display_name,
        "deployedAt": (deployed_at or datetime.now(UTC)).isoformat(),
        "accountId": context.account_id,
    }
    handoff_number = to_e164(context.clinic_phone_number) if context.clinic_phone_number else None

    members = [
        _build_member_payload(member, context, metadata, handoff_number)
        for member in template.member_configs
    ]

    return {
        "name": f"{context.clinic_name} - {template.display_name}",
        "members": members,
    }


def _build_member_payload(
    member: MemberConfig,
    context: RuntimeContext,
    metadata: dict[str, Any],
    handoff_number: str | None,
) -> dict[str, Any]:
    system_prompt = hydrate_placeholders(member.system_prompt, context)
    if handoff_number:
        system_prompt += HUMAN_HANDOFF_PROMPT

    tools: list[dict[str, Any]] = []
    for function_name in TOOL_GROUPS.get(member.tool_group, []):
        tool: dict[str, Any] = {"type": "function", "function": {"name": function_name}}
        if context.webhook_url:
            tool["server"] = {"url": context.webhook_url}
        tools.append(tool)
    if handoff_number:
        tools.append({
            "type": "transferCall",
            "destinations": [
                {
                    "type": "number",
                    "number": handoff_number,
                    "message": "Of course, one moment.",
                }
            ],
        })

    model: dict[str, Any] = {
        "provider": member.model.provider,
        "model": member.model.model,
        "temperature": member.model.temperature,
        "maxTokens": member.model.max_tokens,
        "messages": [{"role": "system", "content": system_prompt}],
    }
    if tools:
        model["tools"] = tools
    if context.knowledge_file_ids:
        model["knowledgeBase"] = {
            "provider": "canonical",
            "fileIds": list(context.knowledge_file_ids),
        }

    first_message = hydrate_placeholders(member.first_message, context)
    assistant: dict[str, Any] = {
        **member.extra,
        "name": member.name,
        "firstMessage": first_message,
        "firstMessageMode": (
            "assistant-speaks-first"
            if first_message
            else "assistant-speaks-first-with-model-generated-message"
        ),
        "model": model,
        "voice": {"provider": member.voice.provider, "voiceId": member.voice.voice_id},
        "metadata": dict(metadata),
    }
    if context.webhook_url:
        assistant["server"] = {"url": context.webhook_url}

    return {
        "assistant": assistant,
        "assistantDestinations": [
            {"type": "assistant", "assistantName": name, "message": ""}
            for name in member.destinations
        ],
    }
