"""Tests for the action lattice, hierarchy registry and policy resolver."""

from __future__ import annotations

import pytest

from tenantcore import (
    ACTION_SEVERITY,
    DEFAULT_HIERARCHY,
    Action,
    ConfigurationError,
    KindDeclaration,
    Policy,
    PolicyResolver,
    ResourceHierarchy,
    ResourceKinds,
    Role,
    UnknownRoleError,
    at_least,
)


class TestActionLattice:
    """Tests for Action severities and at_least()."""

    def test_severity_strictly_increasing(self) -> None:
        """Severity grows in declaration order."""
        severities = [ACTION_SEVERITY[a] for a in Action]
        assert severities == sorted(severities)
        assert len(set(severities)) == len(severities)

    def test_known_values(self) -> None:
        """Severities match the static action table."""
        assert Action.BLOCKED.severity == -1
        assert Action.NONE.severity == 1
        assert Action.AUDIT.severity == 6

    def test_at_least_reflexive(self) -> None:
        """Every action is permitted at its own level."""
        for action in Action:
            assert at_least(action, action)

    def test_at_least_lower_within_higher(self) -> None:
        """Lower actions are permitted at higher levels."""
        assert at_least(Action.READ, Action.AUDIT)
        assert at_least(Action.DELETE, Action.AUDIT)
        assert at_least(Action.CREATE, Action.UPDATE)

    def test_at_least_higher_not_within_lower(self) -> None:
        """Higher actions exceed lower levels."""
        assert not at_least(Action.DELETE, Action.UPDATE)
        assert not at_least(Action.READ, Action.NONE)
        assert not at_least(Action.NONE, Action.BLOCKED)

    def test_at_least_accepts_names(self) -> None:
        """Action names work as well as enum members."""
        assert at_least("read", "audit")
        assert not at_least("audit", "read")

    def test_unknown_action_is_fatal(self) -> None:
        """Unknown action names raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Unknown action"):
            at_least("publish", Action.AUDIT)

    def test_parse_normalizes_case(self) -> None:
        """Action.parse accepts any casing."""
        assert Action.parse(" Update ") is Action.UPDATE


class TestRole:
    """Tests for the closed role enumeration."""

    def test_parse_known_roles(self) -> None:
        """Stored role strings map onto the enumeration."""
        assert Role.parse("superadmin") is Role.GLOBAL_ADMIN
        assert Role.parse("school_admin") is Role.TENANT_ADMIN

    def test_parse_unknown_role(self) -> None:
        """Unknown roles are rejected instead of falling through."""
        with pytest.raises(UnknownRoleError):
            Role.parse("teacher")


class TestKindDeclaration:
    """Tests for declaration validation."""

    def test_inherit_and_policy_conflict(self) -> None:
        """A kind cannot both inherit and declare a policy."""
        with pytest.raises(ValueError, match="cannot both inherit"):
            KindDeclaration(kind="room", parent="school", inherit=True, owner_can="read", anyone_can="none")

    def test_policy_required_without_inherit(self) -> None:
        """A non-inheriting kind must declare both fields."""
        with pytest.raises(ValueError, match="must declare"):
            KindDeclaration(kind="room", parent="school", owner_can="read")

    def test_invalid_action_name(self) -> None:
        """Unknown action names are rejected."""
        with pytest.raises(ValueError, match="Invalid action"):
            KindDeclaration(kind="school", anyone_can="none", owner_can="everything")

    def test_action_strings_coerced(self) -> None:
        """Action names become Action members."""
        decl = KindDeclaration(kind="school", anyone_can="NONE", owner_can="audit")
        assert decl.owner_can is Action.AUDIT
        assert decl.policy == Policy(Action.NONE, Action.AUDIT)


class TestResourceHierarchy:
    """Tests for registry construction and navigation."""

    def test_default_tree(self) -> None:
        """Default hierarchy is school → classroom → student."""
        hierarchy = ResourceHierarchy(DEFAULT_HIERARCHY)
        assert hierarchy.kinds == ("school", "classroom", "student")
        assert hierarchy.roots == ("school",)
        assert hierarchy.parent_of(ResourceKinds.STUDENT) == ResourceKinds.CLASSROOM
        assert hierarchy.parent_of(ResourceKinds.SCHOOL) is None
        assert hierarchy.ancestors("student") == ("classroom", "school")
        assert hierarchy.root_of("student") == "school"
        assert hierarchy.depth("student") == 2
        assert hierarchy.children_of("school") == ("classroom",)

    def test_declared_policy_absent_for_inherit(self) -> None:
        """Pure-inherit kinds have no declared policy."""
        hierarchy = ResourceHierarchy()
        assert hierarchy.declared_policy("classroom") is None
        assert hierarchy.declared_policy("school") == Policy("none", "audit")

    def test_accepts_mappings(self) -> None:
        """Plain dict declarations are validated into KindDeclaration."""
        hierarchy = ResourceHierarchy(
            [
                {"kind": "org", "anyone_can": "none", "owner_can": "update"},
                {"kind": "project", "parent": "org", "inherit": True},
            ]
        )
        assert "project" in hierarchy
        assert len(hierarchy) == 2

    def test_order_independent(self) -> None:
        """Children may be declared before their parents."""
        hierarchy = ResourceHierarchy(tuple(reversed(DEFAULT_HIERARCHY)))
        assert hierarchy.kinds == ("school", "classroom", "student")

    def test_empty_rejected(self) -> None:
        """An empty declaration is a configuration error."""
        with pytest.raises(ConfigurationError, match="no kinds"):
            ResourceHierarchy([])

    def test_duplicate_kind_rejected(self) -> None:
        """Kinds must be unique."""
        with pytest.raises(ConfigurationError, match="Duplicate"):
            ResourceHierarchy([*DEFAULT_HIERARCHY, KindDeclaration(kind="school", anyone_can="none", owner_can="read")])

    def test_missing_parent_rejected(self) -> None:
        """Every parent must be registered."""
        with pytest.raises(ConfigurationError, match="unregistered parent"):
            ResourceHierarchy(
                [
                    KindDeclaration(kind="school", anyone_can="none", owner_can="audit"),
                    KindDeclaration(kind="student", parent="classroom", inherit=True),
                ]
            )

    def test_root_inherit_rejected(self) -> None:
        """A root has no ancestor to inherit from."""
        with pytest.raises(ConfigurationError, match="cannot inherit"):
            ResourceHierarchy([KindDeclaration(kind="school", inherit=True)])

    def test_cycle_rejected(self) -> None:
        """Cycles are detected at construction."""
        with pytest.raises(ConfigurationError, match="cycle"):
            ResourceHierarchy(
                [
                    KindDeclaration(kind="school", anyone_can="none", owner_can="audit"),
                    KindDeclaration(kind="a", parent="b", anyone_can="none", owner_can="read"),
                    KindDeclaration(kind="b", parent="a", inherit=True),
                ]
            )

    def test_self_parent_rejected(self) -> None:
        """A kind cannot be its own parent."""
        with pytest.raises(ConfigurationError, match="cycle"):
            ResourceHierarchy([KindDeclaration(kind="a", parent="a", anyone_can="none", owner_can="read")])

    def test_invalid_mapping_rejected(self) -> None:
        """Malformed mappings raise ConfigurationError, not pydantic errors."""
        with pytest.raises(ConfigurationError, match="Invalid resource kind declaration"):
            ResourceHierarchy([{"kind": "school", "owner_can": "audit", "colour": "red"}])

    def test_unknown_kind_lookup(self) -> None:
        """Looking up an unregistered kind raises ConfigurationError."""
        hierarchy = ResourceHierarchy()
        with pytest.raises(ConfigurationError, match="Unknown resource kind"):
            hierarchy.parent_of("teacher")


class TestPolicyResolver:
    """Tests for effective policy resolution."""

    def test_declared_policy_returned(self) -> None:
        """Kinds with a declared policy resolve to it."""
        resolver = PolicyResolver(ResourceHierarchy())
        assert resolver.resolve("school") == Policy(Action.NONE, Action.AUDIT)

    def test_inherit_equals_parent(self) -> None:
        """Every inheriting kind resolves to its parent's effective policy."""
        hierarchy = ResourceHierarchy()
        resolver = PolicyResolver(hierarchy)
        for kind in hierarchy.kinds:
            if hierarchy.declared_policy(kind) is None:
                assert resolver.resolve(kind) == resolver.resolve(hierarchy.parent_of(kind))

    def test_nearest_declared_ancestor_wins(self) -> None:
        """Inheritance copies the closest declared policy, not the root's."""
        hierarchy = ResourceHierarchy(
            [
                KindDeclaration(kind="school", anyone_can="none", owner_can="audit"),
                KindDeclaration(kind="classroom", parent="school", anyone_can="none", owner_can="update"),
                KindDeclaration(kind="student", parent="classroom", inherit=True),
            ]
        )
        resolver = PolicyResolver(hierarchy)
        assert resolver.resolve("student") == Policy("none", "update")

    def test_inherit_is_verbatim_copy(self) -> None:
        """Both fields come from the same ancestor."""
        hierarchy = ResourceHierarchy(
            [
                KindDeclaration(kind="org", anyone_can="read", owner_can="delete"),
                KindDeclaration(kind="team", parent="org", inherit=True),
            ]
        )
        policy = PolicyResolver(hierarchy).resolve("team")
        assert policy.anyone_can is Action.READ
        assert policy.owner_can is Action.DELETE

    def test_unknown_kind(self) -> None:
        """Resolving an unregistered kind raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            PolicyResolver(ResourceHierarchy()).resolve("teacher")


class TestPolicy:
    """Tests for the Policy value object."""

    def test_immutable(self) -> None:
        """Policies cannot be mutated after construction."""
        policy = Policy("none", "audit")
        with pytest.raises(AttributeError):
            policy.owner_can = Action.READ  # type: ignore[misc]

    def test_value_equality_and_hash(self) -> None:
        """Equal field values mean equal, same-hash policies."""
        assert Policy("none", "read") == Policy(Action.NONE, Action.READ)
        assert hash(Policy("none", "read")) == hash(Policy(Action.NONE, Action.READ))

    def test_as_dict(self) -> None:
        """as_dict exposes action names."""
        assert Policy("none", "audit").as_dict() == {"anyone_can": "none", "owner_can": "audit"}
