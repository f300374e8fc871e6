"""
Tests for the requirement registry and the policy registry.
"""

import threading

import pytest

from claimauthz.authz import (
    ProtectedResource, RequirementRegistry, PolicyRegistry, REQUIRE_CLAIM_POLICY,
    create_registry, create_policy_registry, require_claim_policy, resource_of
)
from claimauthz.claims import ClaimRequirement, Principal
from claimauthz.types.errors import (
    ConfigurationError, InvalidArgumentError, UnknownPolicyError, UnknownResourceError
)


@pytest.fixture
def registry():
    """Registry with a controller-like resource and one action under it."""
    registry = RequirementRegistry()
    registry.declare("reports", ("Dept", "Eng"))
    registry.declare("reports.export", "Role", parent="reports")
    return registry


class TestRequirementRegistry:
    """Test resource declaration and lookup."""

    def test_declare_and_get(self, registry):
        resource = registry.get("reports")

        assert isinstance(resource, ProtectedResource)
        assert resource.requirements == (ClaimRequirement("Dept", "Eng"),)
        assert resource.parent is None
        assert "reports" in registry
        assert len(registry) == 2

    def test_requirements_include_parent_first(self, registry):
        assert registry.requirements_for("reports.export") == (
            ClaimRequirement("Dept", "Eng"),
            ClaimRequirement("Role"),
        )

    def test_declaring_twice_appends(self, registry):
        registry.declare("reports", ("Region", "EU"))

        assert registry.requirements_for("reports") == (
            ClaimRequirement("Dept", "Eng"),
            ClaimRequirement("Region", "EU"),
        )

    def test_redeclaring_keeps_parent(self, registry):
        registry.declare("reports.export", ("Format", "csv"))
        assert registry.get("reports.export").parent == "reports"

    def test_resource_without_requirements(self):
        registry = RequirementRegistry()
        registry.declare("public")
        assert registry.requirements_for("public") == ()

    def test_unknown_resource(self, registry):
        with pytest.raises(UnknownResourceError) as exc_info:
            registry.requirements_for("missing")
        assert exc_info.value.resource_id == "missing"

    def test_unknown_parent(self):
        registry = RequirementRegistry()
        registry.declare("orphan", "Role", parent="ghost")

        with pytest.raises(UnknownResourceError) as exc_info:
            registry.requirements_for("orphan")
        assert exc_info.value.resource_id == "ghost"

    def test_invalid_declarations(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.declare("")
        with pytest.raises(InvalidArgumentError):
            registry.declare("reports", "")
        with pytest.raises(InvalidArgumentError):
            registry.declare("child", parent="")

    def test_cycles_rejected(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.declare("reports", parent="reports.export")
        with pytest.raises(InvalidArgumentError):
            registry.declare("loop", parent="loop")

        # The rejected declaration leaves the registry unchanged
        assert registry.get("reports").parent is None

    def test_remove_and_clear(self, registry):
        assert registry.remove("reports.export") is True
        assert registry.remove("reports.export") is False
        assert [r.resource_id for r in registry.list_resources()] == ["reports"]

        registry.clear()
        assert len(registry) == 0

    def test_protect_decorator(self):
        registry = RequirementRegistry()

        @registry.protect("admin.users", ("Role", "admin"))
        def list_users():
            return ["alice"]

        assert list_users() == ["alice"]
        assert resource_of(list_users) == "admin.users"
        assert registry.requirements_for("admin.users") == (ClaimRequirement("Role", "admin"),)
        assert resource_of(lambda: None) is None

    def test_load_mapping(self):
        registry = create_registry({
            "reports.export": {"parent": "reports", "requires": [{"type": "Role"}]},
            "reports": {"requires": [{"type": "Dept", "value": "Eng"}]},
            "public": None,
        })

        assert len(registry) == 3
        assert registry.requirements_for("reports.export") == (
            ClaimRequirement("Dept", "Eng"),
            ClaimRequirement("Role"),
        )
        assert registry.requirements_for("public") == ()

    def test_load_single_requirement(self):
        registry = create_registry({"admin": {"requires": "Role"}})
        assert registry.requirements_for("admin") == (ClaimRequirement("Role"),)

    def test_load_rejects_bad_entries(self):
        registry = RequirementRegistry()
        with pytest.raises(InvalidArgumentError):
            registry.load(["reports"])
        with pytest.raises(InvalidArgumentError):
            registry.load({"reports": "Dept"})
        with pytest.raises(InvalidArgumentError):
            registry.load({"reports": {"requires": [{"type": ""}]}})

    def test_failed_load_leaves_registry_unchanged(self, registry):
        before = registry.list_resources()

        with pytest.raises(InvalidArgumentError):
            registry.load({
                "audit": {"requires": [{"type": "Role", "value": "auditor"}]},
                "broken": {"requires": [{"type": ""}]},
            })

        assert registry.list_resources() == before
        assert "audit" not in registry

    def test_cyclic_load_leaves_registry_unchanged(self):
        registry = RequirementRegistry()
        registry.declare("b", ("Role", "admin"))

        with pytest.raises(InvalidArgumentError):
            registry.load({
                "a": {"parent": "b", "requires": ["Dept"]},
                "b": {"parent": "a"},
            })

        assert [r.resource_id for r in registry.list_resources()] == ["b"]
        assert registry.get("b").parent is None

    def test_concurrent_declarations(self):
        registry = RequirementRegistry()
        registry.declare("reports", ("Dept", "Eng"))
        errors = []

        def worker(n):
            try:
                resource_id = f"reports.{n}"
                for i in range(50):
                    registry.declare(resource_id, ("Step", str(i)), parent="reports")
                    registry.requirements_for(resource_id)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(registry) == 9
        for n in range(8):
            assert registry.requirements_for(f"reports.{n}") == (
                (ClaimRequirement("Dept", "Eng"),)
                + tuple(ClaimRequirement("Step", str(i)) for i in range(50))
            )

    def test_protected_resource_serialization(self, registry):
        resource = registry.get("reports.export")
        restored = ProtectedResource.from_dict(resource.to_dict())
        assert restored == resource


class TestPolicyRegistry:
    """Test named policy registration."""

    def test_default_policy_registered(self):
        policies = PolicyRegistry()
        assert REQUIRE_CLAIM_POLICY in policies
        assert policies.get_policy(REQUIRE_CLAIM_POLICY) is require_claim_policy

    def test_without_defaults(self):
        policies = PolicyRegistry(include_defaults=False)
        assert policies.list_policies() == []

    def test_require_claim_policy(self):
        principal = Principal.from_mapping({"Dept": "Eng"})
        assert require_claim_policy(principal, [ClaimRequirement("Dept", "Eng")]) is True
        assert require_claim_policy(principal, [ClaimRequirement("Dept", "Ops")]) is False

    def test_add_and_get_policy(self):
        policies = PolicyRegistry()

        @policies.policy("always")
        def always(principal, requirements):
            return True

        assert policies.get_policy("always") is always
        assert policies.list_policies() == ["always", REQUIRE_CLAIM_POLICY]

    def test_duplicate_policy(self):
        policies = PolicyRegistry()
        with pytest.raises(ConfigurationError):
            policies.add_policy(REQUIRE_CLAIM_POLICY, lambda p, r: True)

        policies.add_policy(REQUIRE_CLAIM_POLICY, lambda p, r: True, replace=True)
        assert policies.get_policy(REQUIRE_CLAIM_POLICY) is not require_claim_policy

    def test_invalid_policy(self):
        policies = PolicyRegistry()
        with pytest.raises(InvalidArgumentError):
            policies.add_policy("", lambda p, r: True)
        with pytest.raises(InvalidArgumentError):
            policies.add_policy("broken", "not callable")

    def test_unknown_policy(self):
        policies = PolicyRegistry()
        with pytest.raises(UnknownPolicyError) as exc_info:
            policies.get_policy("missing")
        assert exc_info.value.policy_name == "missing"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_remove_policy(self):
        policies = create_policy_registry({"always": lambda p, r: True})
        assert policies.remove_policy("always") is True
        assert policies.remove_policy("always") is False
        assert "always" not in policies
