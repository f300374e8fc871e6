"""
Named authorization policies.

A policy is a plain function registered under a key. It receives the
principal and the effective requirements of the resource being accessed and
returns whether access is allowed.
"""

from typing import Callable, Dict, List, Optional, Sequence
import logging
import threading

from ..claims.evaluator import satisfies
from ..claims.types import ClaimRequirement, Principal
from ..types.errors import ConfigurationError, InvalidArgumentError, UnknownPolicyError


logger = logging.getLogger(__name__)

PolicyHandler = Callable[[Principal, Sequence[ClaimRequirement]], bool]

# Key under which the claim requirement policy is registered by default
REQUIRE_CLAIM_POLICY = "claimauthz.require_claim"


def require_claim_policy(principal: Principal, requirements: Sequence[ClaimRequirement]) -> bool:
    """Allow when the principal's claims satisfy every requirement."""
    return satisfies(principal.claims, requirements)


class PolicyRegistry:
    """
    Registry of policy handlers keyed by policy name.
    """

    def __init__(self, include_defaults: bool = True):
        self._policies: Dict[str, PolicyHandler] = {}
        self._lock = threading.RLock()
        if include_defaults:
            self.add_policy(REQUIRE_CLAIM_POLICY, require_claim_policy)

    def add_policy(self, name: str, handler: PolicyHandler, replace: bool = False) -> None:
        """
        Register a policy handler.

        Raises:
            InvalidArgumentError: If the name is empty or the handler is not callable
            ConfigurationError: If the name is taken and replace is False
        """
        if not name or not isinstance(name, str):
            raise InvalidArgumentError("Policy name must be a non-empty string", field='name', value=name)
        if not callable(handler):
            raise InvalidArgumentError("Policy handler must be callable", field='handler', value=handler)

        with self._lock:
            if name in self._policies and not replace:
                raise ConfigurationError(
                    f"Policy '{name}' is already registered", config_key='policy', config_value=name
                )
            self._policies[name] = handler
        logger.debug(f"Registered policy {name}")

    def policy(self, name: str, replace: bool = False) -> Callable[[PolicyHandler], PolicyHandler]:
        """Decorator form of add_policy()."""
        def decorator(handler: PolicyHandler) -> PolicyHandler:
            self.add_policy(name, handler, replace=replace)
            return handler
        return decorator

    def get_policy(self, name: str) -> PolicyHandler:
        """
        Get a policy handler by name.

        Raises:
            UnknownPolicyError: If nothing is registered under the name
        """
        with self._lock:
            handler = self._policies.get(name)
        if handler is None:
            raise UnknownPolicyError(name)
        return handler

    def remove_policy(self, name: str) -> bool:
        """Remove a policy."""
        with self._lock:
            return self._policies.pop(name, None) is not None

    def list_policies(self) -> List[str]:
        """List registered policy names."""
        with self._lock:
            return sorted(self._policies)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._policies


def create_policy_registry(extra: Optional[Dict[str, PolicyHandler]] = None) -> PolicyRegistry:
    """Create a policy registry with the default policy plus any extra handlers."""
    registry = PolicyRegistry()
    for name, handler in (extra or {}).items():
        registry.add_policy(name, handler)
    return registry
