"""
Package types provides shared error definitions for claimauthz.

This package contains the exception hierarchy and error codes used across
the claims, registry, policy and authorizer packages.
"""

from .errors import (
    ErrorCode,
    ClaimAuthzError,
    ValidationError,
    InvalidArgumentError,
    ConfigurationError,
    UnknownPolicyError,
    UnknownResourceError,
    AccessDeniedError,
    get_http_status,
    create_error_response,
)

__all__ = [
    'ErrorCode',
    'ClaimAuthzError',
    'ValidationError',
    'InvalidArgumentError',
    'ConfigurationError',
    'UnknownPolicyError',
    'UnknownResourceError',
    'AccessDeniedError',
    'get_http_status',
    'create_error_response',
]
