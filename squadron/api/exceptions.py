"""API exception hierarchy for consistent error handling.

API exceptions inherit from SquadronAPIError, which provides status_code
and error_code attributes used by the global exception handler. Lifecycle
errors raised by the core are mapped through LIFECYCLE_ERROR_STATUS.
"""

from squadron.api.models.errors import ErrorCode
from squadron.lifecycle.errors import ErrorCode as LifecycleErrorCode


class SquadronAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(SquadronAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class TemplateNotFoundAPIError(SquadronAPIError):
    """Raised when a template id does not exist."""

    status_code = 404
    error_code = ErrorCode.TEMPLATE_NOT_FOUND


LIFECYCLE_ERROR_STATUS: dict[LifecycleErrorCode, tuple[int, ErrorCode]] = {
    LifecycleErrorCode.TEMPLATE_NOT_FOUND: (404, ErrorCode.TEMPLATE_NOT_FOUND),
    LifecycleErrorCode.ACCOUNT_NOT_FOUND: (404, ErrorCode.ACCOUNT_NOT_FOUND),
    LifecycleErrorCode.TEMPLATE_INACTIVE: (409, ErrorCode.TEMPLATE_INACTIVE),
    LifecycleErrorCode.NO_HISTORY: (409, ErrorCode.NO_HISTORY),
    LifecycleErrorCode.PROVISION_FAILED: (502, ErrorCode.PROVISION_FAILED),
    LifecycleErrorCode.ROUTING_UPDATE_FAILED: (502, ErrorCode.ROUTING_UPDATE_FAILED),
    LifecycleErrorCode.RESOURCE_DELETE_FAILED: (502, ErrorCode.RESOURCE_DELETE_FAILED),
    LifecycleErrorCode.VALIDATION_ERROR: (400, ErrorCode.VALIDATION_ERROR),
}
