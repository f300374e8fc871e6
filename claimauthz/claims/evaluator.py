"""
Claim requirement evaluation.

A principal satisfies a list of requirements when every requirement is met
by at least one of the principal's claims. Evaluation is a pure function:
it holds no state, never raises for well-typed input and may be called
concurrently from any number of threads.
"""

from typing import Iterable, List, Sequence
import logging

from .types import Claim, ClaimRequirement


logger = logging.getLogger(__name__)


def claim_satisfies(claim: Claim, requirement: ClaimRequirement) -> bool:
    """Check whether a single claim meets a single requirement."""
    if claim.type != requirement.type:
        return False
    return requirement.value is None or claim.value == requirement.value


class ClaimRequirementEvaluator:
    """
    Decides whether a set of claims satisfies a sequence of requirements.
    """

    def satisfies(self, principal_claims: Iterable[Claim],
                  requirements: Sequence[ClaimRequirement]) -> bool:
        """
        Return True iff every requirement is met by some claim.

        Args:
            principal_claims: The claims held by the caller (a Principal works too)
            requirements: Declared requirements, checked in order

        Returns:
            bool: False on the first requirement no claim satisfies
        """
        claims = tuple(principal_claims)
        for requirement in requirements:
            if not any(claim_satisfies(claim, requirement) for claim in claims):
                logger.debug(f"Requirement {requirement} not satisfied")
                return False
        return True

    def unmet_requirements(self, principal_claims: Iterable[Claim],
                           requirements: Sequence[ClaimRequirement]) -> List[ClaimRequirement]:
        """List every requirement no claim satisfies, in declaration order."""
        claims = tuple(principal_claims)
        return [
            requirement for requirement in requirements
            if not any(claim_satisfies(claim, requirement) for claim in claims)
        ]


default_evaluator = ClaimRequirementEvaluator()


def satisfies(principal_claims: Iterable[Claim],
              requirements: Sequence[ClaimRequirement]) -> bool:
    """Evaluate requirements with the shared default evaluator."""
    return default_evaluator.satisfies(principal_claims, requirements)


def unmet_requirements(principal_claims: Iterable[Claim],
                       requirements: Sequence[ClaimRequirement]) -> List[ClaimRequirement]:
    return default_evaluator.unmet_requirements(principal_claims, requirements)
