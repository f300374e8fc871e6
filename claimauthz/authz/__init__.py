"""
Package authz implements resource registration, named policies and
authorization decisions on top of claim requirement evaluation.
"""

from .registry import (
    ProtectedResource,
    RequirementRegistry,
    create_registry,
    resource_of
)

from .policy import (
    REQUIRE_CLAIM_POLICY,
    PolicyHandler,
    PolicyRegistry,
    create_policy_registry,
    require_claim_policy
)

from .authorizer import (
    AccessRequest,
    AccessResponse,
    Authorizer,
    ClaimAuthorizer,
    Decision
)

__all__ = [
    # Registry
    'ProtectedResource',
    'RequirementRegistry',
    'create_registry',
    'resource_of',

    # Policies
    'REQUIRE_CLAIM_POLICY',
    'PolicyHandler',
    'PolicyRegistry',
    'create_policy_registry',
    'require_claim_policy',

    # Core authorization
    'AccessRequest',
    'AccessResponse',
    'Authorizer',
    'ClaimAuthorizer',
    'Decision'
]
