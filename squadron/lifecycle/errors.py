"""Lifecycle error hierarchy.

Every error carries an ErrorCode. Single-tenant operations raise these;
bulk operations catch them per tenant and record the code and message in
the plan entry. The API layer maps codes to HTTP statuses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable lifecycle failure codes."""

    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    """The requested template id does not exist."""

    TEMPLATE_INACTIVE = "TEMPLATE_INACTIVE"
    """The template exists but is deactivated and cannot be deployed."""

    NO_HISTORY = "NO_HISTORY"
    """Rollback requested for an account with no recorded transitions."""

    PROVISION_FAILED = "PROVISION_FAILED"
    """Creating the new resource failed or timed out."""

    ROUTING_UPDATE_FAILED = "ROUTING_UPDATE_FAILED"
    """Re-pointing inbound routing to the new resource failed or timed out."""

    RESOURCE_DELETE_FAILED = "RESOURCE_DELETE_FAILED"
    """Deleting the replaced resource failed. Non-fatal."""

    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    """No deployment record exists for the account."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """The request is malformed or contradicts itself."""


class LifecycleError(Exception):
    """Base exception for template lifecycle failures."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, *, account_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.account_id = account_id


class TemplateNotFoundError(LifecycleError):
    """Raised when a template id does not exist."""

    code = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateInactiveError(LifecycleError):
    """Raised when an inactive template is chosen as a deployment target."""

    code = ErrorCode.TEMPLATE_INACTIVE


class NoHistoryError(LifecycleError):
    """Raised when a rollback has nothing to roll back to."""

    code = ErrorCode.NO_HISTORY


class ProvisionFailedError(LifecycleError):
    """Raised when the new resource could not be created."""

    code = ErrorCode.PROVISION_FAILED


class RoutingUpdateFailedError(LifecycleError):
    """Raised when routing could not be moved to the new resource."""

    code = ErrorCode.ROUTING_UPDATE_FAILED


class ResourceDeleteFailedError(LifecycleError):
    """Raised when the replaced resource could not be deleted.

    The orchestrator catches this and records the stale resource id on
    the deployment instead of failing the swap.
    """

    code = ErrorCode.RESOURCE_DELETE_FAILED


class AccountNotFoundError(LifecycleError):
    """Raised when an account has no deployment record."""

    code = ErrorCode.ACCOUNT_NOT_FOUND


class LifecycleValidationError(LifecycleError):
    """Raised on invalid or contradictory input."""

    code = ErrorCode.VALIDATION_ERROR
