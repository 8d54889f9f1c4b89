"""Per-tenant runtime context injected into provisioning payloads.

Templates are tenant-agnostic. Everything tenant-specific that ends up in
the squad payload (clinic name, hours, contact number, knowledge files,
webhook URL, the phone binding to re-point) comes from a RuntimeContext.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class RuntimeContext(BaseModel):
    """Tenant-specific values used to hydrate a template."""

    account_id: str
    clinic_name: str
    clinic_hours: str | None = None
    clinic_location: str | None = None
    clinic_insurance: str | None = None
    clinic_services: str | None = None
    clinic_phone_number: str | None = Field(
        default=None,
        description="Human handoff number, normalized to E.164 at build time",
    )
    knowledge_file_ids: list[str] = Field(default_factory=list)
    webhook_url: str | None = Field(
        default=None, description="Server URL for tool calls and call events"
    )
    routing_binding_id: str | None = Field(
        default=None,
        description="Inbound phone number id that must point at the live squad",
    )


class RuntimeContextProvider(ABC):
    """Resolves the runtime context for a tenant."""

    @abstractmethod
    async def get_context(self, account_id: str) -> RuntimeContext:
        """Return the runtime context for an account."""
        pass


class StaticRuntimeContextProvider(RuntimeContextProvider):
    """Runtime contexts held in memory.

    Unknown accounts get a bare context named after the account id so a
    redeploy can always build a payload.
    """

    def __init__(
        self,
        contexts: list[RuntimeContext] | None = None,
        default_webhook_url: str | None = None,
    ) -> None:
        self._contexts: dict[str, RuntimeContext] = {}
        self._default_webhook_url = default_webhook_url
        for context in contexts or []:
            self.register(context)

    def register(self, context: RuntimeContext) -> None:
        """Add or replace the context for an account."""
        self._contexts[context.account_id] = context

    async def get_context(self, account_id: str) -> RuntimeContext:
        context = self._contexts.get(account_id)
        if context is not None:
            return context
        return RuntimeContext(
            account_id=account_id,
            clinic_name=account_id,
            webhook_url=self._default_webhook_url,
        )
