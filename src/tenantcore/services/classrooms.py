"""Classroom service."""

from __future__ import annotations

import logging
from typing import ClassVar, Optional, Sequence

from ..engine import AuthorizationEngine
from ..models import Classroom, School
from ..permissions.access import Principal
from ..permissions.actions import Action
from ..permissions.hierarchy import ResourceKinds
from ..repository import Repository
from .base import ResourceService

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "classroom with this name already exists in this school"


class ClassroomService(ResourceService[Classroom]):
    kind: ClassVar[str] = ResourceKinds.CLASSROOM

    def __init__(
        self,
        engine: AuthorizationEngine,
        repository: Repository[Classroom],
        schools: Repository[School],
    ) -> None:
        super().__init__(engine, repository)
        self.schools = schools

    def create_classroom(
        self,
        principal: Principal,
        *,
        name: str,
        capacity: Optional[int] = None,
        resources: Optional[Sequence[str]] = None,
        school_id: Optional[str] = None,
    ) -> Classroom:
        """Create a classroom.

        Tenant admins create in their own school and may omit
        ``school_id``; superadmins must name the school.
        """
        tenant_id = self.engine.creation_tenant(principal, self.kind, school_id)
        classroom = Classroom(
            name=name,
            capacity=capacity,
            resources=list(resources or ()),
            tenant_id=tenant_id,
        )
        self._authorize(principal, classroom, Action.CREATE)
        self.engine.check_parentage(tenant_id, tenant_id, self.schools.lookup)

        self._ensure_unique({"name": name, "tenant_id": tenant_id, "is_active": True}, DUPLICATE_NAME)
        created = self.repository.insert(classroom)
        logger.info(
            "Created classroom %s",
            created.id,
            extra={"user_id": principal.user_id, "tenant_id": tenant_id},
        )
        return created

    def get_classroom(self, principal: Principal, classroom_id: str) -> Classroom:
        return self.get(principal, classroom_id)

    def list_classrooms(self, principal: Principal, school_id: Optional[str] = None) -> list[Classroom]:
        return self.list_visible(principal, school_id)

    def update_classroom(
        self,
        principal: Principal,
        classroom_id: str,
        *,
        name: Optional[str] = None,
        capacity: Optional[int] = None,
        resources: Optional[Sequence[str]] = None,
    ) -> Classroom:
        classroom = self._load_active(classroom_id)
        self._authorize(principal, classroom, Action.UPDATE)

        if name is not None and name != classroom.name:
            self._ensure_unique(
                {"name": name, "tenant_id": classroom.tenant_id, "is_active": True, "id": {"$ne": classroom.id}},
                DUPLICATE_NAME,
            )
        return self._update(
            classroom,
            {
                "name": name,
                "capacity": capacity,
                "resources": list(resources) if resources is not None else None,
            },
        )

    def delete_classroom(self, principal: Principal, classroom_id: str) -> Classroom:
        return self.delete(principal, classroom_id)


__all__ = ["ClassroomService"]
