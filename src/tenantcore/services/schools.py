"""School (tenant root) service."""

from __future__ import annotations

import logging
from typing import ClassVar, Optional

from ..permissions.access import Principal
from ..permissions.actions import Action
from ..permissions.hierarchy import ResourceKinds
from ..models import School
from .base import ResourceService

logger = logging.getLogger(__name__)


class SchoolService(ResourceService[School]):
    """Schools are created, changed and removed by superadmins only.

    Tenant admins can read their own school and nothing else.
    """

    kind: ClassVar[str] = ResourceKinds.SCHOOL
    global_admin_actions = frozenset({Action.CREATE, Action.UPDATE, Action.DELETE})

    def create_school(
        self,
        principal: Principal,
        *,
        name: str,
        address: str,
        email: str,
        phone: Optional[str] = None,
    ) -> School:
        self.engine.creation_tenant(principal, self.kind)
        school = School(name=name, address=address, email=email, phone=phone)
        self._authorize(principal, school, Action.CREATE)

        self._ensure_unique({"email": school.email}, "school with this email already exists")
        created = self.repository.insert(school)
        logger.info("Created school %s", created.id, extra={"user_id": principal.user_id})
        return created

    def get_school(self, principal: Principal, school_id: str) -> School:
        return self.get(principal, school_id)

    def list_schools(self, principal: Principal, school_id: Optional[str] = None) -> list[School]:
        return self.list_visible(principal, school_id)

    def update_school(
        self,
        principal: Principal,
        school_id: str,
        *,
        name: Optional[str] = None,
        address: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> School:
        school = self._load_active(school_id)
        self._authorize(principal, school, Action.UPDATE)

        if email is not None:
            email = email.strip().lower()
            self._ensure_unique(
                {"email": email, "id": {"$ne": school.id}},
                "school with this email already exists",
            )
        return self._update(school, {"name": name, "address": address, "email": email, "phone": phone})

    def delete_school(self, principal: Principal, school_id: str) -> School:
        return self.delete(principal, school_id)


__all__ = ["SchoolService"]
