"""Action lattice and role enumeration.

Provides:
- ``Action`` — totally ordered privilege levels (blocked < none < read <
  create < update < delete < audit).
- ``ACTION_SEVERITY`` — action → integer severity.
- ``at_least()`` — compare a requested action against a granted level.
- ``Role`` — the closed set of principal roles.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ..exceptions import ConfigurationError, UnknownRoleError


class Action(str, Enum):
    """Privilege level requested by an operation or granted by a policy.

    Hierarchy: ``audit`` > ``delete`` > ``update`` > ``create`` > ``read``
    > ``none`` > ``blocked``. Granting a level grants every lower level.
    """

    BLOCKED = "blocked"
    NONE = "none"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    AUDIT = "audit"  # Reserved, no audit trail is recorded

    @property
    def severity(self) -> int:
        return ACTION_SEVERITY[self]

    @classmethod
    def parse(cls, value: str | Action) -> Action:
        """Coerce an action name to :class:`Action`.

        Unknown names are programmer errors and raise
        :class:`ConfigurationError`.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown action: {value!r}. Must be one of {[a.value for a in cls]}",
                action=value,
            ) from None


ACTION_SEVERITY: Mapping[Action, int] = MappingProxyType(
    {
        Action.BLOCKED: -1,
        Action.NONE: 1,
        Action.READ: 2,
        Action.CREATE: 3,
        Action.UPDATE: 4,
        Action.DELETE: 5,
        Action.AUDIT: 6,
    }
)


def severity(action: str | Action) -> int:
    """Integer severity of an action."""
    return ACTION_SEVERITY[Action.parse(action)]


def at_least(requested: str | Action, granted: str | Action) -> bool:
    """Check if a granted level covers a requested action.

    Args:
        requested: Action the caller wants to perform.
        granted: Highest action the policy allows.

    Returns:
        True iff ``severity(requested) <= severity(granted)``.

    Example::

        at_least(Action.READ, Action.AUDIT)    # True
        at_least(Action.DELETE, Action.UPDATE) # False
        at_least("none", "blocked")            # False
    """
    return severity(requested) <= severity(granted)


class Role(str, Enum):
    """Role carried by an authenticated principal.

    Values match the role strings stored on user accounts and embedded
    in verified tokens.
    """

    GLOBAL_ADMIN = "superadmin"
    TENANT_ADMIN = "school_admin"

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """Coerce a role string, rejecting anything outside the enumeration."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownRoleError(
                f"unknown role: {value!r}. Must be one of {[r.value for r in cls]}",
                role=value,
            ) from None


__all__ = [
    "ACTION_SEVERITY",
    "Action",
    "Role",
    "at_least",
    "severity",
]
