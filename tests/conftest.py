"""Shared fixtures: an engine over the default school tree and a seeded data set."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from tenantcore import AuthorizationEngine, Principal, Role
from tenantcore.models import Classroom, School, Student
from tenantcore.services import Services, build_services


@pytest.fixture
def engine() -> AuthorizationEngine:
    return AuthorizationEngine()


@pytest.fixture
def services(engine: AuthorizationEngine) -> Services:
    return build_services(engine)


@pytest.fixture
def superadmin() -> Principal:
    return Principal(role=Role.GLOBAL_ADMIN, user_id="root")


@dataclass
class Tenant:
    school: School
    admin: Principal
    classroom: Classroom
    student: Student


def _seed_tenant(services: Services, superadmin: Principal, suffix: str) -> Tenant:
    school = services.schools.create_school(
        superadmin,
        name=f"School {suffix}",
        address=f"{suffix} Main Street",
        email=f"office@school-{suffix}.edu",
    )
    admin = Principal(role=Role.TENANT_ADMIN, user_id=f"admin-{suffix}", tenant_id=school.id)
    classroom = services.classrooms.create_classroom(admin, name="Room 1", capacity=30)
    student = services.students.create_student(
        admin,
        name=f"Student {suffix}",
        email=f"pupil@school-{suffix}.edu",
        classroom_id=classroom.id,
    )
    return Tenant(school=school, admin=admin, classroom=classroom, student=student)


@pytest.fixture
def t1(services: Services, superadmin: Principal) -> Tenant:
    return _seed_tenant(services, superadmin, "one")


@pytest.fixture
def t2(services: Services, superadmin: Principal) -> Tenant:
    return _seed_tenant(services, superadmin, "two")
