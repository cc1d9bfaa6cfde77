"""Shared plumbing for the per-kind resource services."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from ..engine import AuthorizationEngine
from ..exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models import Record
from ..permissions.access import Principal
from ..permissions.actions import Action
from ..repository import Query, Repository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class ResourceService(Generic[R]):
    """CRUD service for one resource kind.

    Every operation authorizes through the engine; reads of single
    records and all mutations only ever see active records.

    Subclasses set ``kind`` and may list actions reserved to global
    admins in ``global_admin_actions`` (a per-kind business rule applied
    before the engine's decision).
    """

    kind: ClassVar[str]
    global_admin_actions: ClassVar[frozenset[Action]] = frozenset()

    def __init__(self, engine: AuthorizationEngine, repository: Repository[R]) -> None:
        self.engine = engine
        self.repository = repository

    def _authorize(self, principal: Principal, record: R, action: Action) -> None:
        if action in self.global_admin_actions and not principal.is_global_admin:
            logger.info(
                "Denied %s on %s: reserved to superadmin",
                action.value,
                self.kind,
                extra={"user_id": principal.user_id, "tenant_id": principal.tenant_id},
            )
            raise ForbiddenError(
                f"forbidden: only superadmin can {action.value} {self.kind}s",
                kind=self.kind,
                action=action.value,
            )
        self.engine.require(principal, record.as_instance(), action)

    def _load_active(self, record_id: Any) -> R:
        if not record_id:
            raise ValidationError(f"{self.kind} id is required", kind=self.kind)
        record = self.repository.get(str(record_id))
        if record is None or not record.is_active:
            raise NotFoundError(f"{self.kind} not found", kind=self.kind, id=str(record_id))
        return record

    def _ensure_unique(self, query: Query, message: str) -> None:
        if self.repository.find_one(query) is not None:
            raise ConflictError(message, kind=self.kind)

    def _update(self, record: R, changes: Mapping[str, Any]) -> R:
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return record
        updated = self.repository.update(record.id, changes)
        if updated is None:
            raise NotFoundError(f"{self.kind} not found", kind=self.kind, id=record.id)
        return updated

    def get(self, principal: Principal, record_id: Any) -> R:
        record = self._load_active(record_id)
        self._authorize(principal, record, Action.READ)
        return record

    def delete(self, principal: Principal, record_id: Any) -> R:
        """Soft delete: active → inactive, one way."""
        record = self._load_active(record_id)
        self._authorize(principal, record, Action.DELETE)
        deleted = self._update(record, {"is_active": False})
        logger.info(
            "Deactivated %s %s",
            self.kind,
            record.id,
            extra={"user_id": principal.user_id, "tenant_id": record.tenant_id},
        )
        return deleted

    def list_visible(self, principal: Principal, tenant_id: Optional[str] = None, **criteria: Any) -> list[R]:
        predicate = self.engine.scope_filter(principal, tenant_id)
        return self.repository.find(predicate.to_query(**criteria))


__all__ = ["ResourceService"]
