"""Default policies and effective-policy resolution.

Provides:
- ``Policy`` — ``{anyone_can, owner_can}`` pair declared on a resource kind.
- ``PolicyResolver`` — resolves the effective policy of a kind by walking
  the resource hierarchy.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from ..exceptions import ConfigurationError
from .actions import Action

if TYPE_CHECKING:
    from .hierarchy import ResourceHierarchy

logger = logging.getLogger(__name__)


class Policy:
    """Default policy of a resource kind.

    Args:
        anyone_can: Level granted to callers with no ownership of the
            instance. Reserved for an unauthenticated tier; the decision
            function does not evaluate it.
        owner_can: Level granted to the tenant admin owning the instance.

    Example::

        school_policy = Policy(anyone_can=Action.NONE, owner_can=Action.AUDIT)
    """

    __slots__ = ("anyone_can", "owner_can")

    def __init__(self, anyone_can: str | Action, owner_can: str | Action) -> None:
        object.__setattr__(self, "anyone_can", Action.parse(anyone_can))
        object.__setattr__(self, "owner_can", Action.parse(owner_can))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Policy is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return self.anyone_can is other.anyone_can and self.owner_can is other.owner_can

    def __hash__(self) -> int:
        return hash((self.anyone_can, self.owner_can))

    def as_dict(self) -> dict[str, str]:
        return {"anyone_can": self.anyone_can.value, "owner_can": self.owner_can.value}

    def __repr__(self) -> str:
        return f"Policy(anyone_can={self.anyone_can.value!r}, owner_can={self.owner_can.value!r})"


class PolicyResolver:
    """Resolves effective policies against a :class:`ResourceHierarchy`.

    A kind that declares its own policy uses it. A kind marked ``inherit``
    copies the policy of its nearest ancestor that declares one, verbatim:
    fields are never merged or overridden individually.

    Every kind is resolved once at construction, so ``resolve`` is a pure
    lookup afterwards and safe to call from any thread.
    """

    def __init__(self, hierarchy: ResourceHierarchy) -> None:
        self._hierarchy = hierarchy
        self._effective: Mapping[str, Policy] = MappingProxyType(
            {kind: self._walk(kind) for kind in hierarchy.kinds}
        )

    @property
    def hierarchy(self) -> ResourceHierarchy:
        return self._hierarchy

    def resolve(self, kind: str) -> Policy:
        """Effective policy for ``kind``.

        Raises:
            ConfigurationError: ``kind`` is not registered.
        """
        try:
            return self._effective[kind]
        except KeyError:
            raise ConfigurationError(f"Unknown resource kind: {kind!r}", kind=kind) from None

    def _walk(self, kind: str) -> Policy:
        current: str | None = kind
        while current is not None:
            declared = self._hierarchy.declared_policy(current)
            if declared is not None:
                if current != kind:
                    logger.debug("Resource kind '%s' inherits policy from '%s'", kind, current)
                return declared
            current = self._hierarchy.parent_of(current)
        # Unreachable for a hierarchy that passed construction checks
        logger.error("No declared policy above resource kind '%s'", kind)
        raise ConfigurationError(f"No declared policy found for {kind!r} or any ancestor", kind=kind)


__all__ = [
    "Policy",
    "PolicyResolver",
]
