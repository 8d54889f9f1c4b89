"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    """No deployment record exists for the account."""

    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    """The specified template does not exist."""

    TEMPLATE_INACTIVE = "TEMPLATE_INACTIVE"
    """The specified template is inactive and cannot be deployed."""

    NO_HISTORY = "NO_HISTORY"
    """Rollback requested for an account with no history."""

    PROVISION_FAILED = "PROVISION_FAILED"
    """The provisioning API failed to create the new resource."""

    ROUTING_UPDATE_FAILED = "ROUTING_UPDATE_FAILED"
    """The provisioning API failed to re-point routing."""

    RESOURCE_DELETE_FAILED = "RESOURCE_DELETE_FAILED"
    """The provisioning API failed to delete a resource."""

    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    """The account does not exist."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """The request contradicts itself or existing data."""

    PROVISIONING_UNAVAILABLE = "PROVISIONING_UNAVAILABLE"
    """The provisioning API could not be reached."""

    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    """The backing store could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error details for request validation failures."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""

    account_id: str | None = None
    """Account the error relates to, if any."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "TEMPLATE_INACTIVE",
                "message": "Template dental-clinic-v2 (v2.0) is inactive"
            }
        }
    """

    error: ErrorBody
