"""Tenant scoping for collection reads.

``scope_filter()`` turns a principal (and an optional tenant filter taken
from the request) into a :class:`ScopePredicate`. The predicate is pushed
into the storage query via :meth:`ScopePredicate.to_query`, so rows from
other tenants are never loaded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .access import Principal, normalize_tenant_id
from .actions import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopePredicate:
    """Visibility filter: one tenant, or every tenant when ``tenant_id`` is None."""

    tenant_id: Optional[str] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.tenant_id is None

    def matches(self, tenant_id: Any) -> bool:
        return self.tenant_id is None or self.tenant_id == normalize_tenant_id(tenant_id)

    def to_query(self, tenant_field: str = "tenant_id", **criteria: Any) -> dict[str, Any]:
        """Storage query for active rows visible under this predicate.

        Args:
            tenant_field: Record field holding the tenant id.
            **criteria: Extra equality filters (e.g. ``classroom_id=...``).
                They narrow the result and can never widen the tenant scope.
        """
        query: dict[str, Any] = {k: v for k, v in criteria.items() if v is not None}
        query["is_active"] = True
        if self.tenant_id is not None:
            query[tenant_field] = self.tenant_id
        return query


def scope_filter(principal: Principal, explicit_tenant_id: Any = None) -> ScopePredicate:
    """Derive the collection scope of ``principal``.

    - Global admin, no filter: every tenant.
    - Global admin with a filter: that tenant.
    - Tenant admin: always their own tenant; any filter in the request is
      ignored, so it can neither widen nor redirect the scope.
    """
    explicit = normalize_tenant_id(explicit_tenant_id)
    if principal.role is Role.GLOBAL_ADMIN:
        return ScopePredicate(tenant_id=explicit)

    if explicit is not None and explicit != principal.tenant_id:
        logger.debug(
            "Ignoring tenant filter %s for tenant admin of %s",
            explicit,
            principal.tenant_id,
            extra={"user_id": principal.user_id},
        )
    return ScopePredicate(tenant_id=principal.tenant_id)


__all__ = [
    "ScopePredicate",
    "scope_filter",
]
