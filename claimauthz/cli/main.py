"""
claimauthz-check: evaluate a principal against a requirements file.

Example:
    claimauthz-check --requirements resources.yaml --resource reports.export \\
        --claim Dept=Eng --claim Role

Prints the decision as JSON. Exit status is 0 when access is allowed, 1 when
it is denied and 2 on configuration or usage errors.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..authz.authorizer import ClaimAuthorizer
from ..authz.registry import RequirementRegistry
from ..claims.types import Claim, Principal
from ..config import load_requirements
from ..types.errors import ClaimAuthzError
from ..util.log import configure_logging


logger = logging.getLogger(__name__)

EXIT_ALLOWED = 0
EXIT_DENIED = 1
EXIT_ERROR = 2


def parse_claim(text: str) -> Claim:
    """Parse TYPE=VALUE, or a bare TYPE for a claim without a value."""
    claim_type, sep, value = text.partition('=')
    if not claim_type:
        raise argparse.ArgumentTypeError(f"claim type missing in '{text}'")
    return Claim(claim_type, value if sep else None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='claimauthz-check',
        description='Check whether a set of claims satisfies the requirements of a resource.'
    )
    parser.add_argument('--requirements', required=True,
                        help='YAML or JSON file with a "resources" mapping')
    parser.add_argument('--resource', required=True, help='resource id to check')
    parser.add_argument('--claim', action='append', type=parse_claim, default=[],
                        metavar='TYPE[=VALUE]', help='claim held by the principal (repeatable)')
    parser.add_argument('--principal-id', default=None, help='id recorded for the principal')
    parser.add_argument('--policy', default=None, help='policy name (default: require-claim policy)')
    parser.add_argument('--anonymous', action='store_true',
                        help='check as an unauthenticated caller')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        registry = RequirementRegistry()
        registry.load(load_requirements(args.requirements))
        logger.debug(f"Loaded {len(registry)} resource(s) from {args.requirements}")
        authorizer = ClaimAuthorizer(registry)

        principal = None
        if not args.anonymous:
            principal = Principal.from_claims(args.claim, id=args.principal_id)

        decision = authorizer.authorize(principal, args.resource, args.policy)
    except ClaimAuthzError as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return EXIT_ERROR

    print(json.dumps(decision.to_dict(), indent=2))
    return EXIT_ALLOWED if decision.allowed else EXIT_DENIED


if __name__ == '__main__':
    sys.exit(main())
