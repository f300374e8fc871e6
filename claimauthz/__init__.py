"""
claimauthz Python Package

Declarative claims-based authorization: declare the claims a resource
requires, then decide whether a principal's claims satisfy them.
"""

__version__ = "0.1.0"

from .claims import Claim, ClaimRequirement, Principal, ClaimRequirementEvaluator, satisfies
from .authz import (
    REQUIRE_CLAIM_POLICY,
    RequirementRegistry,
    PolicyRegistry,
    ClaimAuthorizer,
    Decision,
    AccessRequest,
    AccessResponse,
)
from .config import AuthzConfig
from .factory import create_authorizer
from .types.errors import (
    ClaimAuthzError,
    InvalidArgumentError,
    ConfigurationError,
    UnknownPolicyError,
    UnknownResourceError,
    AccessDeniedError,
)

__all__ = [
    "Claim",
    "ClaimRequirement",
    "Principal",
    "ClaimRequirementEvaluator",
    "satisfies",
    "REQUIRE_CLAIM_POLICY",
    "RequirementRegistry",
    "PolicyRegistry",
    "ClaimAuthorizer",
    "Decision",
    "AccessRequest",
    "AccessResponse",
    "AuthzConfig",
    "create_authorizer",
    "ClaimAuthzError",
    "InvalidArgumentError",
    "ConfigurationError",
    "UnknownPolicyError",
    "UnknownResourceError",
    "AccessDeniedError",
]
