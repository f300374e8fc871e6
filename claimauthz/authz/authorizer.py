"""
Authorization decisions for protected resources.

The authorizer looks up the effective requirements of a resource, hands them
with the principal to a named policy and turns the answer into a Decision
carrying an HTTP-style status. Transport concerns stay with the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar
import asyncio
import functools
import inspect
import logging

from ..audit.logger import AuditLogger, DecisionRecord
from ..claims.evaluator import unmet_requirements
from ..claims.types import ClaimRequirement, Principal
from ..metrics.collector import AuthzMetrics
from ..types.errors import AccessDeniedError, UnknownResourceError
from .policy import REQUIRE_CLAIM_POLICY, PolicyRegistry, require_claim_policy
from .registry import RequirementRegistry


F = TypeVar('F', bound=Callable[..., Any])

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


@dataclass
class Decision:
    """
    Authorization decision with the reason, policy and status to report.
    """
    allowed: bool
    reason: str
    resource_id: str
    policy: str
    http_status: int = HTTP_OK
    unmet: Tuple[ClaimRequirement, ...] = field(default_factory=tuple)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'allowed': self.allowed,
            'reason': self.reason,
            'resource_id': self.resource_id,
            'policy': self.policy,
            'http_status': self.http_status,
            'unmet': [r.to_dict() for r in self.unmet],
            'timestamp': self.timestamp.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Decision':
        """Create from dictionary representation."""
        return cls(
            allowed=data['allowed'],
            reason=data['reason'],
            resource_id=data['resource_id'],
            policy=data['policy'],
            http_status=data.get('http_status', HTTP_OK if data['allowed'] else HTTP_FORBIDDEN),
            unmet=tuple(ClaimRequirement.from_dict(r) for r in data.get('unmet', [])),
            timestamp=datetime.fromisoformat(data['timestamp'])
        )


@dataclass
class AccessRequest:
    """
    Request to access a protected resource.
    """
    principal: Optional[Principal]
    resource_id: str
    policy: Optional[str] = None
    context: Dict[str, str] = field(default_factory=dict)


@dataclass
class AccessResponse:
    """
    Result of an access check, with annotations for audit and compliance.
    """
    allowed: bool
    reason: str
    http_status: int
    policy: Optional[str] = None
    annotations: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'allowed': self.allowed,
            'reason': self.reason,
            'http_status': self.http_status,
            'policy': self.policy,
            'annotations': self.annotations
        }


class Authorizer(ABC):
    """
    Base class for authorization engines.
    """

    @abstractmethod
    def authorize(self, principal: Optional[Principal], resource_id: str,
                  policy: Optional[str] = None) -> Decision:
        """
        Determine if a principal may access a resource.

        Args:
            principal: The authenticated caller, or None when unauthenticated
            resource_id: The protected resource
            policy: Policy name; the authorizer's default when omitted

        Returns:
            Decision: Authorization decision with reason and status
        """
        pass

    async def is_allowed(self, request: AccessRequest) -> AccessResponse:
        """
        Check if an access request should be allowed.

        Evaluation is synchronous and non-blocking; this coroutine exists so
        async pipelines can await it like their other checks.
        """
        decision = self.authorize(request.principal, request.resource_id, request.policy)
        annotations = dict(request.context)
        annotations.update({
            'resource_id': decision.resource_id,
            'evaluation_time': decision.timestamp.isoformat()
        })
        if decision.unmet:
            annotations['unmet'] = ', '.join(str(r) for r in decision.unmet)

        return AccessResponse(
            allowed=decision.allowed,
            reason=decision.reason,
            http_status=decision.http_status,
            policy=decision.policy,
            annotations=annotations
        )

    def guard(self, resource_id: str, policy: Optional[str] = None) -> Callable[[F], F]:
        """
        Decorator enforcing authorization before a callable runs.

        The caller's principal is read from the callable's 'principal'
        argument, passed either positionally or by keyword.

        Raises:
            AccessDeniedError: When the decision denies access
        """
        def decorator(func: F) -> F:
            signature = inspect.signature(func)

            def check(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
                bound = signature.bind_partial(*args, **kwargs)
                principal = bound.arguments.get('principal', kwargs.get('principal'))
                decision = self.authorize(principal, resource_id, policy)
                if not decision.allowed:
                    raise AccessDeniedError(decision)

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                check(args, kwargs)
                return await func(*args, **kwargs)

            @functools.wraps(func)
            def sync_wrapper(*args, **kwargs):
                check(args, kwargs)
                return func(*args, **kwargs)

            return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper

        return decorator


class ClaimAuthorizer(Authorizer):
    """
    Authorizer backed by a requirement registry and a policy registry.
    """

    def __init__(self,
                 registry: RequirementRegistry,
                 policies: Optional[PolicyRegistry] = None,
                 audit_logger: Optional[AuditLogger] = None,
                 metrics: Optional[AuthzMetrics] = None,
                 default_policy: str = REQUIRE_CLAIM_POLICY):
        self.registry = registry
        self.policies = policies or PolicyRegistry()
        self.audit_logger = audit_logger
        self.metrics = metrics
        self.default_policy = default_policy

    def authorize(self, principal: Optional[Principal], resource_id: str,
                  policy: Optional[str] = None) -> Decision:
        policy_name = policy or self.default_policy
        # Unknown policies are configuration errors and propagate
        handler = self.policies.get_policy(policy_name)

        if principal is None:
            return self._finish(principal, Decision(
                allowed=False,
                reason="No authenticated principal",
                resource_id=resource_id,
                policy=policy_name,
                http_status=HTTP_UNAUTHORIZED
            ))

        try:
            requirements = self.registry.requirements_for(resource_id)
        except UnknownResourceError as e:
            return self._finish(principal, Decision(
                allowed=False,
                reason=e.message,
                resource_id=resource_id,
                policy=policy_name,
                http_status=HTTP_FORBIDDEN
            ))

        if self.metrics:
            with self.metrics.time_evaluation(policy_name):
                allowed = bool(handler(principal, requirements))
        else:
            allowed = bool(handler(principal, requirements))

        if allowed:
            decision = Decision(
                allowed=True,
                reason=f"Access allowed by policy {policy_name}",
                resource_id=resource_id,
                policy=policy_name
            )
        else:
            unmet: Tuple[ClaimRequirement, ...] = ()
            if handler is require_claim_policy:
                unmet = tuple(unmet_requirements(principal.claims, requirements))
            reason = f"Access denied by policy {policy_name}"
            if unmet:
                reason += ": missing " + ", ".join(str(r) for r in unmet)
            decision = Decision(
                allowed=False,
                reason=reason,
                resource_id=resource_id,
                policy=policy_name,
                http_status=HTTP_FORBIDDEN,
                unmet=unmet
            )

        return self._finish(principal, decision)

    def _finish(self, principal: Optional[Principal], decision: Decision) -> Decision:
        principal_id = principal.id if principal is not None else None

        if decision.allowed:
            logger.info(f"Allowed {principal_id or '<anonymous>'} on {decision.resource_id}")
        else:
            logger.warning(
                f"Denied {principal_id or '<anonymous>'} on {decision.resource_id}: {decision.reason}"
            )

        if self.metrics:
            self.metrics.record_decision(decision.allowed, decision.policy)

        if self.audit_logger:
            record = DecisionRecord(
                resource_id=decision.resource_id,
                policy=decision.policy,
                allowed=decision.allowed,
                reason=decision.reason,
                principal_id=principal_id,
                timestamp=decision.timestamp
            )
            try:
                self.audit_logger.log(record)
            except Exception:
                logger.exception(f"Failed to write audit record {record.event_id}")

        return decision
