"""Authorization decision function and the values it works on.

Provides:
- ``Principal`` — the verified caller (role, tenant, user).
- ``ResourceInstance`` — the concrete object being acted on.
- ``Decision`` — permit/deny with an optional reason.
- ``authorize()`` — hierarchy-aware permit/deny for one action.
- ``resolve_creation_tenant()`` — which tenant a new resource lands in.

Used by the resource services before every mutation and read of a
single instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..exceptions import ForbiddenError, ValidationError
from .actions import Action, Role, at_least

if TYPE_CHECKING:
    from .hierarchy import ResourceHierarchy
    from .policy import PolicyResolver

logger = logging.getLogger(__name__)

CROSS_TENANT = "cross-tenant access denied"
EXCEEDS_OWNER = "action exceeds owner privilege"


def normalize_tenant_id(tenant_id: Any) -> Optional[str]:
    """Tenant id as a comparable string, None when absent."""
    # Ids arrive as strings, ObjectId-like objects or ints; compare by value
    if tenant_id is None or tenant_id == "":
        return None
    return str(tenant_id)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, trusted as handed over by token verification.

    - role: Closed role enumeration; strings are parsed and unknown
      values rejected.
    - user_id: Identity of the account making the request.
    - tenant_id: Tenant the caller administers. Required for tenant
      admins, ignored for global admins.
    """

    role: Role
    user_id: str
    tenant_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role.parse(self.role))
        if self.user_id is None or self.user_id == "":
            raise ValidationError("user id is required")
        object.__setattr__(self, "user_id", str(self.user_id))
        object.__setattr__(self, "tenant_id", normalize_tenant_id(self.tenant_id))
        if self.role is Role.TENANT_ADMIN and self.tenant_id is None:
            raise ValidationError("no school assigned to this user", user_id=self.user_id)

    @property
    def is_global_admin(self) -> bool:
        return self.role is Role.GLOBAL_ADMIN

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> Principal:
        """Build a principal from verified token claims.

        Accepts both the token's camelCase keys (``userId``, ``schoolId``)
        and snake_case keys.
        """
        role = claims.get("role")
        if role is None:
            raise ValidationError("role claim is required")
        user_id = claims.get("user_id") or claims.get("userId")
        if not user_id:
            raise ValidationError("user id claim is required")
        tenant_id = claims.get("tenant_id") or claims.get("schoolId")
        return cls(role=Role.parse(role), user_id=user_id, tenant_id=tenant_id)


@dataclass(frozen=True)
class ResourceInstance:
    """Concrete resource an action targets.

    ``tenant_id`` is the id of the root tenant the instance belongs to,
    whatever its depth. ``owner_chain`` lists ancestor ids, root first.
    """

    kind: str
    tenant_id: str
    id: Optional[str] = None
    owner_chain: tuple[str, ...] = field(default=())
    active: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenant_id", normalize_tenant_id(self.tenant_id))
        object.__setattr__(self, "owner_chain", tuple(str(i) for i in self.owner_chain))


@dataclass(frozen=True)
class Decision:
    """Outcome of :func:`authorize`."""

    permit: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(permit=True)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(permit=False, reason=reason)

    @property
    def denied(self) -> bool:
        return not self.permit

    def raise_for_denial(self, **details: Any) -> None:
        """Raise :class:`ForbiddenError` if this decision denies."""
        if not self.permit:
            raise ForbiddenError(f"forbidden: {self.reason}", reason=self.reason, **details)


def authorize(
    principal: Principal,
    instance: ResourceInstance,
    action: str | Action,
    resolver: PolicyResolver,
) -> Decision:
    """Decide whether ``principal`` may perform ``action`` on ``instance``.

    Checks in order:
    1. Global admin — always permitted, no tenant scoping.
    2. Tenant mismatch — denied as cross-tenant.
    3. Owner — permitted iff ``action`` is within the effective
       ``owner_can`` of the instance's kind.

    ``anyone_can`` is not consulted: unauthenticated callers are rejected
    before they reach this function.

    Args:
        principal: Verified caller.
        instance: Target resource.
        action: Requested action.
        resolver: Resolver over the process-wide hierarchy.

    Returns:
        Decision; never raises for a denial.

    Example::

        decision = authorize(admin_of_t1, student_in_t2, Action.READ, resolver)
        decision.permit  # False
        decision.reason  # "cross-tenant access denied"
    """
    action = Action.parse(action)

    if principal.role is Role.GLOBAL_ADMIN:
        return Decision.allow()

    if principal.tenant_id != instance.tenant_id:
        logger.info(
            "Denied %s on %s %s: %s",
            action.value,
            instance.kind,
            instance.id or "<new>",
            CROSS_TENANT,
            extra={"user_id": principal.user_id, "tenant_id": principal.tenant_id},
        )
        return Decision.deny(CROSS_TENANT)

    policy = resolver.resolve(instance.kind)
    if at_least(action, policy.owner_can):
        return Decision.allow()

    logger.info(
        "Denied %s on %s %s: %s (owner_can=%s)",
        action.value,
        instance.kind,
        instance.id or "<new>",
        EXCEEDS_OWNER,
        policy.owner_can.value,
        extra={"user_id": principal.user_id, "tenant_id": principal.tenant_id},
    )
    return Decision.deny(EXCEEDS_OWNER)


def resolve_creation_tenant(
    principal: Principal,
    kind: str,
    requested_tenant_id: Any,
    hierarchy: ResourceHierarchy,
) -> Optional[str]:
    """Tenant a new resource of ``kind`` is created under.

    - Tenant admin: may not name another tenant; defaults to their own.
      Tenant admins cannot create root (tenant) resources at all.
    - Global admin, root kind: must not name a tenant; returns None.
    - Global admin, nested kind: must name the target tenant.

    Raises:
        ForbiddenError: Tenant admin targeting another tenant or a root kind.
        ValidationError: Global admin naming a tenant for a root kind, or
            omitting it for a nested kind.
    """
    requested = normalize_tenant_id(requested_tenant_id)
    is_root = hierarchy.is_root(kind)

    if principal.role is Role.TENANT_ADMIN:
        if is_root:
            raise ForbiddenError(f"forbidden: only superadmin can create {kind}s", kind=kind)
        if requested is not None and requested != principal.tenant_id:
            raise ForbiddenError(
                f"forbidden: school_admin cannot create {kind}s in other schools",
                kind=kind,
                tenant_id=requested,
            )
        return principal.tenant_id

    if is_root:
        if requested is not None:
            raise ValidationError(f"{kind} is a top-level resource and cannot belong to a school", kind=kind)
        return None

    if requested is None:
        raise ValidationError("schoolId is required", kind=kind)
    return requested


__all__ = [
    "CROSS_TENANT",
    "EXCEEDS_OWNER",
    "Decision",
    "Principal",
    "ResourceInstance",
    "authorize",
    "normalize_tenant_id",
    "resolve_creation_tenant",
]
