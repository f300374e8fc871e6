"""
Basic claimauthz usage example.

This example demonstrates the fundamental claimauthz operations:
- Declaring claim requirements on resources
- Evaluating principals against them
- Guarding a function
- Reading the audit trail
"""

import asyncio

from claimauthz import (
    AccessDeniedError, AccessRequest, ClaimAuthorizer, ClaimRequirement, Principal,
    RequirementRegistry, satisfies
)
from claimauthz.audit import MemoryAuditLogger
from claimauthz.util import configure_logging


async def basic_example():
    """Demonstrate basic claimauthz usage"""
    print("Basic claimauthz Example")
    print("=" * 30)

    # 1. Plain evaluation
    alice = Principal.from_mapping({"Dept": "Eng", "Role": "dev"}, id="alice")
    bob = Principal.from_mapping({"Dept": "Eng", "Role": ["dev", "admin"]}, id="bob")

    print(f"✓ alice satisfies Dept=Eng: {satisfies(alice, [ClaimRequirement('Dept', 'Eng')])}")
    print(f"✓ alice satisfies Role=admin: {satisfies(alice, [ClaimRequirement('Role', 'admin')])}")

    # 2. Declare resources; the export action inherits the reports requirements
    registry = RequirementRegistry()
    registry.declare("reports", ("Dept", "Eng"))
    registry.declare("reports.export", ("Role", "admin"), parent="reports")

    audit = MemoryAuditLogger()
    authorizer = ClaimAuthorizer(registry, audit_logger=audit)

    for principal in (alice, bob):
        decision = authorizer.authorize(principal, "reports.export")
        print(f"✓ {principal.id} on reports.export: {decision.http_status} {decision.reason}")

    # 3. Async pipelines await the same decision
    response = await authorizer.is_allowed(AccessRequest(bob, "reports"))
    print(f"✓ async check for bob on reports: allowed={response.allowed}")

    # 4. Guard a function
    @authorizer.guard("reports.export")
    def export_report(report_id, principal=None):
        return f"report {report_id} exported"

    print(f"✓ {export_report('q3', principal=bob)}")
    try:
        export_report("q3", principal=alice)
    except AccessDeniedError as e:
        print(f"✓ alice refused: {e}")

    # 5. Audit trail
    denied = audit.get_events(allowed=False)
    print(f"✓ {len(audit.get_events())} decisions audited, {len(denied)} denied")


if __name__ == "__main__":
    configure_logging("WARNING")
    asyncio.run(basic_example())
