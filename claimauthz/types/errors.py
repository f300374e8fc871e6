"""
Error types and error codes for claimauthz.
Provides structured error handling across all packages.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Standard error codes used across claimauthz."""
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"
    VALIDATION_FAILED = "validation_failed"
    CONFIGURATION_ERROR = "configuration_error"

    def __str__(self) -> str:
        return self.value


# Error code constants for easy import
INVALID_REQUEST = ErrorCode.INVALID_REQUEST
UNAUTHORIZED = ErrorCode.UNAUTHORIZED
FORBIDDEN = ErrorCode.FORBIDDEN
NOT_FOUND = ErrorCode.NOT_FOUND
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR
VALIDATION_FAILED = ErrorCode.VALIDATION_FAILED
CONFIGURATION_ERROR = ErrorCode.CONFIGURATION_ERROR


class ClaimAuthzError(Exception):
    """Base exception for all claimauthz errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationError(ClaimAuthzError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, VALIDATION_FAILED, details)
        self.field = field
        self.value = value

        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = str(value)


class InvalidArgumentError(ValidationError, ValueError):
    """Raised when a value object or registration is built from a bad argument."""


class ConfigurationError(ClaimAuthzError):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, CONFIGURATION_ERROR, details, cause)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)


class UnknownPolicyError(ConfigurationError):
    """Raised when a policy name has no registered handler."""

    def __init__(self, policy_name: str):
        super().__init__(
            f"No authorization policy registered under '{policy_name}'",
            config_key='policy',
            config_value=policy_name
        )
        self.policy_name = policy_name


class UnknownResourceError(ClaimAuthzError):
    """Raised when a resource has no declared requirements."""

    def __init__(self, resource_id: str):
        super().__init__(
            f"Resource '{resource_id}' is not registered",
            NOT_FOUND,
            {'resource_id': resource_id}
        )
        self.resource_id = resource_id


class AccessDeniedError(ClaimAuthzError):
    """Raised by guarded callables when the authorizer denies access."""

    def __init__(self, decision: Any):
        error_code = UNAUTHORIZED if decision.http_status == 401 else FORBIDDEN
        super().__init__(decision.reason, error_code, {
            'resource_id': decision.resource_id,
            'policy': decision.policy,
        })
        self.decision = decision


# Error mapping for HTTP status codes
ERROR_CODE_TO_HTTP_STATUS = {
    INVALID_REQUEST: 400,
    UNAUTHORIZED: 401,
    FORBIDDEN: 403,
    NOT_FOUND: 404,
    INTERNAL_ERROR: 500,
    VALIDATION_FAILED: 422,
    CONFIGURATION_ERROR: 500,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


def create_error_response(error: ClaimAuthzError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        'error': error.error_code.value,
        'message': error.message,
        'details': error.details,
        'http_status': get_http_status(error.error_code)
    }
