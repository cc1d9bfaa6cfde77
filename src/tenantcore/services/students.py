"""Student service."""

from __future__ import annotations

import logging
from typing import ClassVar, Optional

from ..engine import AuthorizationEngine
from ..exceptions import ValidationError
from ..models import Classroom, School, Student
from ..permissions.access import Principal
from ..permissions.actions import Action
from ..permissions.hierarchy import ResourceKinds
from ..repository import Repository
from .base import ResourceService

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "student with this email already exists"


class StudentService(ResourceService[Student]):
    """Students belong to a school and optionally to one of its classrooms."""

    kind: ClassVar[str] = ResourceKinds.STUDENT

    def __init__(
        self,
        engine: AuthorizationEngine,
        repository: Repository[Student],
        schools: Repository[School],
        classrooms: Repository[Classroom],
    ) -> None:
        super().__init__(engine, repository)
        self.schools = schools
        self.classrooms = classrooms

    def create_student(
        self,
        principal: Principal,
        *,
        name: str,
        email: str,
        school_id: Optional[str] = None,
        classroom_id: Optional[str] = None,
    ) -> Student:
        tenant_id = self.engine.creation_tenant(principal, self.kind, school_id)
        student = Student(name=name, email=email, tenant_id=tenant_id, classroom_id=classroom_id or None)
        self._authorize(principal, student, Action.CREATE)

        self.engine.check_parentage(tenant_id, tenant_id, self.schools.lookup)
        if student.classroom_id:
            self.engine.check_parentage(tenant_id, student.classroom_id, self.classrooms.lookup)

        # E-mail is unique across all schools
        self._ensure_unique({"email": student.email}, DUPLICATE_EMAIL)
        created = self.repository.insert(student)
        logger.info(
            "Created student %s",
            created.id,
            extra={"user_id": principal.user_id, "tenant_id": tenant_id},
        )
        return created

    def get_student(self, principal: Principal, student_id: str) -> Student:
        return self.get(principal, student_id)

    def list_students(
        self,
        principal: Principal,
        school_id: Optional[str] = None,
        classroom_id: Optional[str] = None,
    ) -> list[Student]:
        return self.list_visible(principal, school_id, classroom_id=classroom_id)

    def update_student(
        self,
        principal: Principal,
        student_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Student:
        student = self._load_active(student_id)
        self._authorize(principal, student, Action.UPDATE)

        if email is not None:
            email = email.strip().lower()
            if email != student.email:
                self._ensure_unique({"email": email, "id": {"$ne": student.id}}, DUPLICATE_EMAIL)
        return self._update(student, {"name": name, "email": email})

    def delete_student(self, principal: Principal, student_id: str) -> Student:
        return self.delete(principal, student_id)

    def transfer_student(self, principal: Principal, student_id: str, classroom_id: str) -> Student:
        """Move a student into another active classroom of their own school."""
        if not classroom_id:
            raise ValidationError("classroomId is required", kind=self.kind)
        student = self._load_active(student_id)
        self._authorize(principal, student, Action.UPDATE)

        self.engine.check_parentage(student.tenant_id, student.tenant_id, self.schools.lookup)
        self.engine.check_parentage(student.tenant_id, classroom_id, self.classrooms.lookup)
        transferred = self._update(student, {"classroom_id": str(classroom_id)})
        logger.info(
            "Transferred student %s to classroom %s",
            student.id,
            classroom_id,
            extra={"user_id": principal.user_id, "tenant_id": student.tenant_id},
        )
        return transferred


__all__ = ["StudentService"]
