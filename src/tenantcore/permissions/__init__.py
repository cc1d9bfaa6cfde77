"""Hierarchical multi-tenant authorization core.

Defines:
- Action / Role: action lattice and closed role enumeration
- ResourceHierarchy: validated kind tree with policy inheritance
- PolicyResolver: effective policy per resource kind
- authorize(): permit/deny for a principal, instance and action
- scope_filter(): tenant predicate for collection reads
- check_parentage(): parent/child tenant consistency
"""

from .access import (
    CROSS_TENANT,
    EXCEEDS_OWNER,
    Decision,
    Principal,
    ResourceInstance,
    authorize,
    normalize_tenant_id,
    resolve_creation_tenant,
)
from .actions import ACTION_SEVERITY, Action, Role, at_least, severity
from .hierarchy import (
    DEFAULT_HIERARCHY,
    HierarchyConfig,
    KindDeclaration,
    ResourceHierarchy,
    ResourceKinds,
    build_default_hierarchy,
)
from .integrity import ParentLookup, check_parentage
from .policy import Policy, PolicyResolver
from .scoping import ScopePredicate, scope_filter

__all__ = [
    "ACTION_SEVERITY",
    "CROSS_TENANT",
    "DEFAULT_HIERARCHY",
    "EXCEEDS_OWNER",
    "Action",
    "Decision",
    "HierarchyConfig",
    "KindDeclaration",
    "ParentLookup",
    "Policy",
    "PolicyResolver",
    "Principal",
    "ResourceHierarchy",
    "ResourceInstance",
    "ResourceKinds",
    "Role",
    "ScopePredicate",
    "at_least",
    "authorize",
    "build_default_hierarchy",
    "check_parentage",
    "normalize_tenant_id",
    "resolve_creation_tenant",
    "scope_filter",
    "severity",
]
