"""
Registry mapping protected resources to their declared claim requirements.

Resources are registered explicitly, usually at application start-up. A
resource may name a parent resource (a controller for an action, say); the
effective requirements of a resource are its parents' requirements followed
by its own, and all of them must be satisfied.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar
import logging
import threading

from ..claims.types import ClaimRequirement
from ..types.errors import InvalidArgumentError, UnknownResourceError


F = TypeVar('F', bound=Callable[..., Any])

logger = logging.getLogger(__name__)

RESOURCE_ATTRIBUTE = '__claimauthz_resource__'


@dataclass(frozen=True)
class ProtectedResource:
    """A resource together with the requirements declared directly on it."""
    resource_id: str
    requirements: Tuple[ClaimRequirement, ...] = field(default_factory=tuple)
    parent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'resource_id': self.resource_id,
            'parent': self.parent,
            'requires': [r.to_dict() for r in self.requirements]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProtectedResource':
        """Create from dictionary representation."""
        return cls(
            resource_id=data['resource_id'],
            requirements=tuple(ClaimRequirement.coerce(r) for r in data.get('requires', [])),
            parent=data.get('parent')
        )


class RequirementRegistry:
    """
    Thread-safe store of protected resources.
    """

    def __init__(self):
        self._resources: Dict[str, ProtectedResource] = {}
        self._lock = threading.RLock()

    def declare(self, resource_id: str, *requirements: Any,
                parent: Optional[str] = None) -> ProtectedResource:
        """
        Declare requirements for a resource.

        Declaring an already registered resource appends the new requirements.
        Passing a parent replaces the previous parent.

        Args:
            resource_id: Identifier of the protected resource
            *requirements: ClaimRequirement objects, claim types or (type, value) tuples
            parent: Optional enclosing resource whose requirements also apply

        Returns:
            ProtectedResource: The resource as now registered
        """
        declared = tuple(ClaimRequirement.coerce(r) for r in requirements)

        with self._lock:
            resource = self._stage(self._resources, resource_id, declared, parent)

        logger.debug(
            f"Declared {len(declared)} requirement(s) on {resource_id}"
            + (f" (parent {resource.parent})" if resource.parent else "")
        )
        return resource

    def _stage(self, resources: Dict[str, ProtectedResource], resource_id: str,
               declared: Tuple[ClaimRequirement, ...],
               parent: Optional[str]) -> ProtectedResource:
        if not resource_id or not isinstance(resource_id, str):
            raise InvalidArgumentError(
                "Resource id must be a non-empty string", field='resource_id', value=resource_id
            )
        if parent is not None and (not parent or not isinstance(parent, str)):
            raise InvalidArgumentError(
                "Parent resource id must be a non-empty string", field='parent', value=parent
            )

        existing = resources.get(resource_id)
        if parent is None and existing is not None:
            parent = existing.parent
        if parent is not None:
            self._check_cycle(resources, resource_id, parent)

        resource = ProtectedResource(
            resource_id=resource_id,
            requirements=(existing.requirements if existing else ()) + declared,
            parent=parent
        )
        resources[resource_id] = resource
        return resource

    @staticmethod
    def _check_cycle(resources: Dict[str, ProtectedResource], resource_id: str, parent: str) -> None:
        seen = {resource_id}
        current: Optional[str] = parent
        while current is not None:
            if current in seen:
                raise InvalidArgumentError(
                    f"Parent '{parent}' would make '{resource_id}' its own ancestor",
                    field='parent', value=parent
                )
            seen.add(current)
            ancestor = resources.get(current)
            current = ancestor.parent if ancestor else None

    def protect(self, resource_id: str, *requirements: Any,
                parent: Optional[str] = None) -> Callable[[F], F]:
        """
        Decorator form of declare().

        The requirements are registered when the decorator is applied and the
        decorated object is tagged with its resource id so a pipeline can map
        a handler back to its resource.
        """
        def decorator(target: F) -> F:
            self.declare(resource_id, *requirements, parent=parent)
            setattr(target, RESOURCE_ATTRIBUTE, resource_id)
            return target
        return decorator

    def get(self, resource_id: str) -> Optional[ProtectedResource]:
        """Get a resource by id."""
        with self._lock:
            return self._resources.get(resource_id)

    def requirements_for(self, resource_id: str) -> Tuple[ClaimRequirement, ...]:
        """
        Effective requirements of a resource, outermost parent first.

        Raises:
            UnknownResourceError: If the resource, or a parent it names, is not registered
        """
        with self._lock:
            chain: List[ProtectedResource] = []
            current: Optional[str] = resource_id
            while current is not None:
                resource = self._resources.get(current)
                if resource is None:
                    raise UnknownResourceError(current)
                chain.append(resource)
                current = resource.parent

        effective: Tuple[ClaimRequirement, ...] = ()
        for resource in reversed(chain):
            effective += resource.requirements
        return effective

    def remove(self, resource_id: str) -> bool:
        """Remove a resource. Children naming it as parent become unresolvable."""
        with self._lock:
            if resource_id in self._resources:
                del self._resources[resource_id]
                return True
            return False

    def list_resources(self) -> List[ProtectedResource]:
        """List all resources ordered by id."""
        with self._lock:
            return [self._resources[k] for k in sorted(self._resources)]

    def clear(self) -> None:
        with self._lock:
            self._resources.clear()

    def load(self, resources: Mapping[str, Any]) -> int:
        """
        Bulk-declare resources from a parsed configuration mapping.

        Expected shape::

            {"reports": {"requires": [{"type": "Dept", "value": "Eng"}]},
             "reports.export": {"parent": "reports", "requires": ["Role"]}}

        Parents may appear after their children in the mapping. The mapping
        is applied as a whole: if any entry is invalid or the parents form a
        cycle, the registry is left unchanged.

        Returns:
            int: Number of resources loaded
        """
        if not isinstance(resources, Mapping):
            raise InvalidArgumentError("Resources must be a mapping", value=type(resources).__name__)

        entries: List[Tuple[Any, Tuple[ClaimRequirement, ...], Any]] = []
        for resource_id, entry in resources.items():
            entry = entry or {}
            if not isinstance(entry, Mapping):
                raise InvalidArgumentError(
                    f"Entry for resource '{resource_id}' must be a mapping", field=str(resource_id)
                )
            requires = entry.get('requires') or []
            if isinstance(requires, (str, Mapping)):
                requires = [requires]
            entries.append((
                resource_id,
                tuple(ClaimRequirement.coerce(r) for r in requires),
                entry.get('parent')
            ))

        with self._lock:
            staged = dict(self._resources)
            # Declare everything first so parents listed later resolve
            for resource_id, declared, _ in entries:
                self._stage(staged, resource_id, declared, None)
            for resource_id, _, parent in entries:
                if parent is not None:
                    self._stage(staged, resource_id, (), parent)
            self._resources = staged

        logger.info(f"Loaded {len(entries)} protected resource(s)")
        return len(entries)

    def __contains__(self, resource_id: object) -> bool:
        with self._lock:
            return resource_id in self._resources

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)


def resource_of(target: Any) -> Optional[str]:
    """Resource id a callable was tagged with by RequirementRegistry.protect()."""
    return getattr(target, RESOURCE_ATTRIBUTE, None)


def create_registry(resources: Optional[Mapping[str, Any]] = None) -> RequirementRegistry:
    """Create a registry, optionally pre-loaded from a configuration mapping."""
    registry = RequirementRegistry()
    if resources:
        registry.load(resources)
    return registry
