"""
Claim types for claimauthz.
Implements claims, claim requirements and the principal that holds them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ..types.errors import InvalidArgumentError


@dataclass(frozen=True)
class Claim:
    """
    An assertion about a principal, expressed as a type/value pair.
    Equality is exact on both fields.
    """
    type: str
    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'type': self.type,
            'value': self.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Claim':
        """Create from dictionary representation."""
        return cls(type=data['type'], value=data.get('value'))

    def __str__(self) -> str:
        return self.type if self.value is None else f"{self.type}={self.value}"


@dataclass(frozen=True)
class ClaimRequirement:
    """
    A declared constraint a principal's claims must satisfy.

    The type must be a non-empty string. A value of None means any value
    of that claim type is accepted.
    """
    type: str
    value: Optional[str] = None

    def __post_init__(self):
        if self.type is None:
            raise InvalidArgumentError("Claim type is required", field='type')
        if not isinstance(self.type, str):
            raise InvalidArgumentError(
                "Claim type must be a string", field='type', value=self.type
            )
        if not self.type:
            raise InvalidArgumentError("Claim type cannot be empty", field='type')
        if self.value is not None and not isinstance(self.value, str):
            raise InvalidArgumentError(
                "Claim value must be a string or None", field='value', value=self.value
            )

    @property
    def matches_any_value(self) -> bool:
        return self.value is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'type': self.type,
            'value': self.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClaimRequirement':
        """Create from dictionary representation."""
        if 'type' not in data:
            raise InvalidArgumentError("Claim requirement is missing 'type'", field='type')
        return cls(type=data['type'], value=data.get('value'))

    @classmethod
    def coerce(cls, item: Union['ClaimRequirement', str, Tuple[str, Optional[str]], Mapping[str, Any]]) -> 'ClaimRequirement':
        """
        Build a requirement from its shorthand forms.

        Accepts an existing requirement, a bare claim type, a (type, value)
        tuple or a mapping with 'type' and optional 'value'.
        """
        if isinstance(item, cls):
            return item
        if isinstance(item, str):
            return cls(item)
        if isinstance(item, tuple):
            if len(item) != 2:
                raise InvalidArgumentError(
                    "Requirement tuples must be (type, value)", value=item
                )
            return cls(item[0], item[1])
        if isinstance(item, Mapping):
            return cls.from_dict(dict(item))
        raise InvalidArgumentError(
            f"Cannot build a claim requirement from {type(item).__name__}", value=item
        )

    def __str__(self) -> str:
        return f"{self.type}=*" if self.value is None else f"{self.type}={self.value}"


@dataclass(frozen=True)
class Principal:
    """
    The authenticated entity making a request: an unordered set of claims.
    Supplied by the authentication layer and never mutated here.
    """
    claims: FrozenSet[Claim] = field(default_factory=frozenset)
    id: Optional[str] = None

    def __post_init__(self):
        # Accept any iterable of claims while keeping the instance immutable
        if not isinstance(self.claims, frozenset):
            object.__setattr__(self, 'claims', frozenset(self.claims))

    @classmethod
    def from_claims(cls, claims: Iterable[Claim], id: Optional[str] = None) -> 'Principal':
        return cls(claims=frozenset(claims), id=id)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Union[None, str, Iterable[str]]],
                     id: Optional[str] = None) -> 'Principal':
        """
        Create a principal from {claim_type: value} pairs.

        A list value yields one claim per element; the values are not split
        or normalized.
        """
        claims: List[Claim] = []
        for claim_type, value in mapping.items():
            if value is None or isinstance(value, str):
                claims.append(Claim(claim_type, value))
            else:
                claims.extend(Claim(claim_type, v) for v in value)
        return cls(claims=frozenset(claims), id=id)

    def has_claim(self, claim_type: str, value: Optional[str] = None) -> bool:
        """Check for a claim of the given type and, if given, value."""
        return any(
            c.type == claim_type and (value is None or c.value == value)
            for c in self.claims
        )

    def values_of(self, claim_type: str) -> List[Optional[str]]:
        """All values held for a claim type, sorted for stable output."""
        return sorted(
            (c.value for c in self.claims if c.type == claim_type),
            key=lambda v: (v is not None, v or '')
        )

    def __iter__(self):
        return iter(self.claims)

    def __len__(self) -> int:
        return len(self.claims)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'id': self.id,
            'claims': [c.to_dict() for c in sorted(self.claims, key=lambda c: (c.type, c.value or ''))]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Principal':
        """Create from dictionary representation."""
        return cls(
            claims=frozenset(Claim.from_dict(c) for c in data.get('claims', [])),
            id=data.get('id')
        )
