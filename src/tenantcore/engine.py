"""AuthorizationEngine — single entrypoint for request handlers.

Wires the resource hierarchy and policy resolver once at startup and
exposes the engine contract:

- ``authorize(principal, instance, action) -> Decision``
- ``scope_filter(principal, explicit_tenant_id=None) -> ScopePredicate``
- ``check_parentage(child_tenant_id, declared_parent_id, lookup)``
- ``resolve_effective_policy(kind) -> Policy``

The engine holds only immutable configuration; every method is pure and
safe to call concurrently from any number of request handlers.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from .config import SharedConfig
from .permissions.access import (
    Decision,
    Principal,
    ResourceInstance,
    authorize,
    resolve_creation_tenant,
)
from .permissions.actions import Action
from .permissions.hierarchy import (
    DeclarationLike,
    HierarchyConfig,
    ResourceHierarchy,
    build_default_hierarchy,
)
from .permissions.integrity import ParentLookup, check_parentage
from .permissions.policy import Policy, PolicyResolver
from .permissions.scoping import ScopePredicate, scope_filter

logger = logging.getLogger(__name__)


class AuthorizationEngine:
    """Hierarchy-aware authorization for every resource kind.

    Adding a nested resource kind only needs a hierarchy entry; the same
    ``authorize`` call covers it.

    Example::

        engine = AuthorizationEngine()
        decision = engine.authorize(principal, instance, Action.UPDATE)
        if not decision.permit:
            ...

        query = engine.scope_filter(principal, request_school_id).to_query()
        students = repository.find(query)
    """

    def __init__(
        self,
        hierarchy: Optional[ResourceHierarchy | HierarchyConfig | Iterable[DeclarationLike]] = None,
    ) -> None:
        if hierarchy is None:
            hierarchy = build_default_hierarchy()
        elif not isinstance(hierarchy, ResourceHierarchy):
            hierarchy = ResourceHierarchy(hierarchy)
        self._hierarchy = hierarchy
        self._resolver = PolicyResolver(hierarchy)
        logger.debug("AuthorizationEngine ready with kinds: %s", ", ".join(hierarchy.kinds))

    @classmethod
    def from_config(cls, config: SharedConfig) -> AuthorizationEngine:
        return cls(ResourceHierarchy.from_config(config.hierarchy))

    @property
    def hierarchy(self) -> ResourceHierarchy:
        return self._hierarchy

    @property
    def resolver(self) -> PolicyResolver:
        return self._resolver

    # ── Decision ─────────────────────────────────────────

    def authorize(self, principal: Principal, instance: ResourceInstance, action: str | Action) -> Decision:
        """Permit or deny ``action`` on ``instance`` for ``principal``."""
        return authorize(principal, instance, action, self._resolver)

    def require(self, principal: Principal, instance: ResourceInstance, action: str | Action) -> None:
        """Like :meth:`authorize`, raising :class:`ForbiddenError` on denial."""
        self.authorize(principal, instance, action).raise_for_denial(kind=instance.kind, resource_id=instance.id)

    def resolve_effective_policy(self, kind: str) -> Policy:
        return self._resolver.resolve(kind)

    def creation_tenant(self, principal: Principal, kind: str, requested_tenant_id: Any = None) -> Optional[str]:
        """Tenant a new ``kind`` resource is created under; see :func:`resolve_creation_tenant`."""
        return resolve_creation_tenant(principal, kind, requested_tenant_id, self._hierarchy)

    # ── Scoping & integrity ──────────────────────────────

    def scope_filter(self, principal: Principal, explicit_tenant_id: Any = None) -> ScopePredicate:
        return scope_filter(principal, explicit_tenant_id)

    def check_parentage(self, child_tenant_id: Any, declared_parent_id: Any, lookup: ParentLookup) -> None:
        check_parentage(child_tenant_id, declared_parent_id, lookup)


__all__ = ["AuthorizationEngine"]
