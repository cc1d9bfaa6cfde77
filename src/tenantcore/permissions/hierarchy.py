"""Resource hierarchy registry.

Provides:
- ``KindDeclaration`` — one static ``{kind, parent, policy | inherit}`` entry.
- ``HierarchyConfig`` — the full declaration, defaulting to the school tree.
- ``ResourceHierarchy`` — validated, immutable tree built once at startup.
- ``DEFAULT_HIERARCHY`` — built-in school → classroom → student declaration.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..exceptions import ConfigurationError
from .actions import Action
from .policy import Policy

logger = logging.getLogger(__name__)


class ResourceKinds:
    """Well-known resource kinds of the school tree."""

    SCHOOL = "school"
    CLASSROOM = "classroom"
    STUDENT = "student"

    ALL = frozenset({"school", "classroom", "student"})


class KindDeclaration(BaseModel):
    """Static declaration of one resource kind.

    A kind either declares ``anyone_can`` and ``owner_can``, or sets
    ``inherit`` to copy its nearest ancestor's policy. Never both.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    kind: str = Field(min_length=1, description="Resource kind name")
    parent: Optional[str] = Field(default=None, description="Parent kind, None for a root")
    anyone_can: Optional[Action] = Field(default=None, description="Level granted to non-owners")
    owner_can: Optional[Action] = Field(default=None, description="Level granted to the tenant owner")
    inherit: bool = Field(default=False, description="Copy the nearest ancestor's policy")

    @field_validator("anyone_can", "owner_can", mode="before")
    @classmethod
    def validate_action(cls, v: Any) -> Optional[Action]:
        """Convert action names to Action enum."""
        if v is None or isinstance(v, Action):
            return v
        if isinstance(v, str):
            try:
                return Action(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid action: {v}. Must be one of {[a.value for a in Action]}")
        raise ValueError(f"Action must be string or Action enum, got {type(v)}")

    @model_validator(mode="after")
    def validate_policy_or_inherit(self) -> KindDeclaration:
        declares = self.anyone_can is not None or self.owner_can is not None
        if self.inherit and declares:
            raise ValueError(f"Resource kind '{self.kind}' cannot both inherit and declare a policy")
        if not self.inherit and (self.anyone_can is None or self.owner_can is None):
            raise ValueError(f"Resource kind '{self.kind}' must declare anyone_can and owner_can or inherit")
        return self

    @property
    def policy(self) -> Policy | None:
        if self.inherit:
            return None
        return Policy(anyone_can=self.anyone_can, owner_can=self.owner_can)


DEFAULT_HIERARCHY: tuple[KindDeclaration, ...] = (
    KindDeclaration(kind=ResourceKinds.SCHOOL, anyone_can=Action.NONE, owner_can=Action.AUDIT),
    KindDeclaration(kind=ResourceKinds.CLASSROOM, parent=ResourceKinds.SCHOOL, inherit=True),
    KindDeclaration(kind=ResourceKinds.STUDENT, parent=ResourceKinds.CLASSROOM, inherit=True),
)


class HierarchyConfig(BaseModel):
    """Declarative resource hierarchy, loaded once at process start."""

    model_config = {"extra": "forbid"}

    kinds: list[KindDeclaration] = Field(
        default_factory=lambda: list(DEFAULT_HIERARCHY),
        description="Resource kinds, parents before or after children",
    )


DeclarationLike = Union[KindDeclaration, Mapping[str, Any]]


def _coerce(declaration: DeclarationLike) -> KindDeclaration:
    if isinstance(declaration, KindDeclaration):
        return declaration
    try:
        return KindDeclaration.model_validate(declaration)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid resource kind declaration: {e}", declaration=declaration) from e


class ResourceHierarchy:
    """Immutable tree of resource kinds.

    Construction fails with :class:`ConfigurationError` when the
    declaration is empty, repeats a kind, names an unregistered parent,
    contains a cycle, or has a root that requests inheritance.

    Example::

        hierarchy = ResourceHierarchy(DEFAULT_HIERARCHY)
        hierarchy.parent_of("student")        # "classroom"
        hierarchy.declared_policy("student")  # None (inherits)
        hierarchy.ancestors("student")        # ("classroom", "school")
    """

    __slots__ = ("_parents", "_policies", "_kinds")

    def __init__(self, declarations: Iterable[DeclarationLike] | HierarchyConfig = DEFAULT_HIERARCHY) -> None:
        if isinstance(declarations, HierarchyConfig):
            declarations = declarations.kinds
        parsed = [_coerce(d) for d in declarations]
        if not parsed:
            raise ConfigurationError("Resource hierarchy declares no kinds")

        parents: dict[str, Optional[str]] = {}
        policies: dict[str, Policy] = {}
        for decl in parsed:
            if decl.kind in parents:
                raise ConfigurationError(f"Duplicate resource kind: {decl.kind!r}", kind=decl.kind)
            parents[decl.kind] = decl.parent
            if decl.policy is not None:
                policies[decl.kind] = decl.policy

        for kind, parent in parents.items():
            if parent is None:
                if kind not in policies:
                    raise ConfigurationError(f"Root resource kind {kind!r} cannot inherit a policy", kind=kind)
            elif parent not in parents:
                raise ConfigurationError(
                    f"Resource kind {kind!r} has unregistered parent {parent!r}",
                    kind=kind,
                    parent=parent,
                )

        _check_acyclic(parents)

        self._parents: Mapping[str, Optional[str]] = MappingProxyType(parents)
        self._policies: Mapping[str, Policy] = MappingProxyType(policies)
        self._kinds: tuple[str, ...] = tuple(sorted(parents, key=lambda k: (self._depth(k), k)))
        logger.debug("Resource hierarchy built: %s", ", ".join(self._kinds))

    @classmethod
    def from_config(cls, config: HierarchyConfig) -> ResourceHierarchy:
        return cls(config.kinds)

    @property
    def kinds(self) -> tuple[str, ...]:
        """All registered kinds, roots first."""
        return self._kinds

    @property
    def roots(self) -> tuple[str, ...]:
        return tuple(k for k in self._kinds if self._parents[k] is None)

    def __contains__(self, kind: object) -> bool:
        return kind in self._parents

    def __iter__(self):
        return iter(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)

    def parent_of(self, kind: str) -> Optional[str]:
        self._require(kind)
        return self._parents[kind]

    def declared_policy(self, kind: str) -> Optional[Policy]:
        """Policy declared on ``kind`` itself, None when it inherits."""
        self._require(kind)
        return self._policies.get(kind)

    def is_root(self, kind: str) -> bool:
        return self.parent_of(kind) is None

    def ancestors(self, kind: str) -> tuple[str, ...]:
        """Ancestors of ``kind``, nearest first."""
        chain: list[str] = []
        current = self.parent_of(kind)
        while current is not None:
            chain.append(current)
            current = self._parents[current]
        return tuple(chain)

    def root_of(self, kind: str) -> str:
        chain = self.ancestors(kind)
        return chain[-1] if chain else kind

    def depth(self, kind: str) -> int:
        self._require(kind)
        return self._depth(kind)

    def children_of(self, kind: str) -> tuple[str, ...]:
        self._require(kind)
        return tuple(k for k in self._kinds if self._parents[k] == kind)

    def _depth(self, kind: str) -> int:
        depth = 0
        current = self._parents[kind]
        while current is not None:
            depth += 1
            current = self._parents[current]
        return depth

    def _require(self, kind: str) -> None:
        if kind not in self._parents:
            raise ConfigurationError(f"Unknown resource kind: {kind!r}", kind=kind)

    def __repr__(self) -> str:
        return f"ResourceHierarchy(kinds={self._kinds!r})"


def _check_acyclic(parents: Mapping[str, Optional[str]]) -> None:
    for start in parents:
        seen = {start}
        current = parents[start]
        while current is not None:
            if current in seen:
                raise ConfigurationError(f"Resource hierarchy has a cycle through {current!r}", kind=start)
            seen.add(current)
            current = parents[current]


def build_default_hierarchy() -> ResourceHierarchy:
    """Hierarchy for the built-in school → classroom → student tree."""
    return ResourceHierarchy(DEFAULT_HIERARCHY)


__all__ = [
    "DEFAULT_HIERARCHY",
    "HierarchyConfig",
    "KindDeclaration",
    "ResourceHierarchy",
    "ResourceKinds",
    "build_default_hierarchy",
]
