"""Per-kind resource services built on the authorization engine.

Provides:
- ``SchoolService`` — tenant roots, superadmin-managed.
- ``ClassroomService`` — classrooms within a school.
- ``StudentService`` — students, optionally placed in a classroom.
- ``UserService`` — administrator accounts.
- ``build_services()`` — wire all of them over in-memory repositories.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..engine import AuthorizationEngine
from ..models import Classroom, School, Student, User
from ..repository import InMemoryRepository, UniqueConstraint
from .base import ResourceService
from .classrooms import ClassroomService
from .schools import SchoolService
from .students import StudentService
from .users import UserService


@dataclass
class Services:
    schools: SchoolService
    classrooms: ClassroomService
    students: StudentService
    users: UserService


def build_services(engine: Optional[AuthorizationEngine] = None) -> Services:
    """All services over fresh in-memory repositories.

    Unique constraints mirror the document store's indexes: e-mail per
    school/student/user, username per user, and active classroom names
    per school.
    """
    engine = engine or AuthorizationEngine()
    schools = InMemoryRepository(School, unique=[UniqueConstraint(("email",))])
    classrooms = InMemoryRepository(
        Classroom,
        unique=[UniqueConstraint(("tenant_id", "name"), active_only=True)],
    )
    students = InMemoryRepository(Student, unique=[UniqueConstraint(("email",))])
    users = InMemoryRepository(
        User,
        unique=[UniqueConstraint(("email",)), UniqueConstraint(("username",))],
    )
    return Services(
        schools=SchoolService(engine, schools),
        classrooms=ClassroomService(engine, classrooms, schools),
        students=StudentService(engine, students, schools, classrooms),
        users=UserService(engine, users, schools),
    )


__all__ = [
    "ClassroomService",
    "ResourceService",
    "SchoolService",
    "Services",
    "StudentService",
    "UserService",
    "build_services",
]
