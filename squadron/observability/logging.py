"""Structured logging configuration using structlog.

JSON output in production, console output in development. Swaps bind
account_id and swap_kind through structlog.contextvars, so every event
logged during a swap carries them.

Redaction is tuned to what this service logs: provisioning errors echo
clinic contact numbers, while ids (accounts, squads, transitions, phone
bindings) must reach the audit trail intact.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

from squadron.config.models.observability import LoggingConfig

SECRET_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "credentials",
    "private_key",
    "access_token",
    "bearer",
})

# Any key containing one of these holds contact data.
CONTACT_KEY_PARTS: tuple[str, ...] = ("phone", "email", "routing_number")

# Keys with these suffixes are identifiers and are never rewritten.
IDENTIFIER_SUFFIXES: tuple[str, ...] = ("_id", "_ids")

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

# Phone-shaped tokens standing alone, never digit runs inside ids or uuids.
PHONE_PATTERN = re.compile(
    r"(?<![\w-])"
    r"(?:\+\d{1,3}[\s.-]?)?"
    r"(?:\(\d{3}\)|\d{3})[\s.-]?\d{3}[\s.-]?\d{4}"
    r"(?![\w-])"
)

_NON_DIGITS = re.compile(r"\D")

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}


def mask_contact(value: Any) -> str:
    """Mask a contact value, keeping the last four digits of a number."""
    if not isinstance(value, str):
        return "[REDACTED]"
    if EMAIL_PATTERN.search(value):
        return "[EMAIL]"
    digits = _NON_DIGITS.sub("", value)
    if len(digits) >= 7:
        return f"[PHONE ***{digits[-4:]}]"
    return "[REDACTED]"


class PIIRedactor:
    """Processor that redacts PII from log events.

    Keys decide first: secrets are replaced, contact fields are masked,
    identifiers pass through unchanged. Other string values are scanned
    for emails and phone numbers.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_mapping(event_dict))

    def _redact_mapping(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            name = key.lower()
            if name in SECRET_KEYS:
                result[key] = "[REDACTED]"
            elif name == "id" or name.endswith(IDENTIFIER_SUFFIXES):
                result[key] = value
            elif any(part in name for part in CONTACT_KEY_PARTS):
                result[key] = mask_contact(value)
            else:
                result[key] = self._redact_value(value)
        return result

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, str):
            value = EMAIL_PATTERN.sub("[EMAIL]", value)
            return PHONE_PATTERN.sub("[PHONE]", value)
        if isinstance(value, dict):
            return self._redact_mapping(value)
        if isinstance(value, list | tuple):
            return [self._redact_value(item) for item in value]
        return value


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog from the logging section of the settings."""
    config = config or LoggingConfig()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if config.redact_pii:
        processors.append(PIIRedactor())

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS[config.level]),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to a module name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
