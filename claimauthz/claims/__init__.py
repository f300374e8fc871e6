"""
Package claims implements claims, claim requirements and their evaluation.
"""

from .types import (
    Claim,
    ClaimRequirement,
    Principal
)

from .evaluator import (
    ClaimRequirementEvaluator,
    claim_satisfies,
    default_evaluator,
    satisfies,
    unmet_requirements
)

__all__ = [
    # Types
    'Claim',
    'ClaimRequirement',
    'Principal',

    # Evaluation
    'ClaimRequirementEvaluator',
    'claim_satisfies',
    'default_evaluator',
    'satisfies',
    'unmet_requirements'
]
