"""Tests for the in-memory repository."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tenantcore import ConflictError
from tenantcore.models import Classroom, School, Student
from tenantcore.repository import InMemoryRepository, UniqueConstraint

FIXED = datetime(2024, 9, 1, tzinfo=timezone.utc)


@pytest.fixture
def students() -> InMemoryRepository[Student]:
    return InMemoryRepository(Student, unique=[UniqueConstraint(("email",))], clock=lambda: FIXED)


class TestInMemoryRepository:
    """Tests for queries, updates and unique constraints."""

    def test_find_by_fields(self, students: InMemoryRepository[Student]) -> None:
        """Equality queries filter records."""
        a = students.insert(Student(name="A", email="a@x.org", tenant_id="t1"))
        students.insert(Student(name="B", email="b@x.org", tenant_id="t2"))
        assert students.find({"tenant_id": "t1"}) == [a]
        assert len(students) == 2

    def test_query_operators(self, students: InMemoryRepository[Student]) -> None:
        """$ne and $in are understood."""
        a = students.insert(Student(name="A", email="a@x.org", tenant_id="t1"))
        b = students.insert(Student(name="B", email="b@x.org", tenant_id="t2"))
        assert students.find({"id": {"$ne": a.id}}) == [b]
        assert {s.id for s in students.find({"tenant_id": {"$in": ["t1", "t2"]}})} == {a.id, b.id}

    def test_unique_constraint_on_insert(self, students: InMemoryRepository[Student]) -> None:
        """Duplicate keys are rejected at write time."""
        students.insert(Student(name="A", email="a@x.org", tenant_id="t1"))
        with pytest.raises(ConflictError, match="email already exists"):
            students.insert(Student(name="A2", email="A@x.org", tenant_id="t2"))

    def test_update_revalidates(self, students: InMemoryRepository[Student]) -> None:
        """Updates go through model validation and stamp updated_at."""
        a = students.insert(Student(name="A", email="a@x.org", tenant_id="t1"))
        updated = students.update(a.id, {"email": " NEW@x.org"})
        assert updated is not None
        assert updated.email == "new@x.org"
        assert updated.updated_at == FIXED
        assert students.get(a.id) == updated

    def test_update_missing(self, students: InMemoryRepository[Student]) -> None:
        """Updating an unknown id returns None."""
        assert students.update("missing", {"name": "X"}) is None

    def test_active_only_constraint(self) -> None:
        """Inactive records do not hold active-only keys."""
        rooms = InMemoryRepository(Classroom, unique=[UniqueConstraint(("tenant_id", "name"), active_only=True)])
        first = rooms.insert(Classroom(name="R1", tenant_id="t1"))
        with pytest.raises(ConflictError):
            rooms.insert(Classroom(name="R1", tenant_id="t1"))
        rooms.update(first.id, {"is_active": False})
        rooms.insert(Classroom(name="R1", tenant_id="t1"))
        with pytest.raises(ConflictError):
            rooms.update(first.id, {"is_active": True})

    def test_results_are_copies(self, students: InMemoryRepository[Student]) -> None:
        """Mutating returned records leaves the store unchanged."""
        a = students.insert(Student(name="A", email="a@x.org", tenant_id="t1"))
        a.name = "changed after insert"
        fetched = students.get(a.id)
        assert fetched is not None
        fetched.is_active = False
        students.find({"tenant_id": "t1"})[0].email = "b@x.org"
        updated = students.update(a.id, {"name": "B"})
        assert updated is not None
        updated.is_active = False

        stored = students.get(a.id)
        assert stored is not None
        assert stored.name == "B"
        assert stored.is_active is True
        assert stored.email == "a@x.org"
        students.insert(Student(name="C", email="b@x.org", tenant_id="t1"))

    def test_lookup_skips_inactive(self) -> None:
        """lookup() only returns active records, as resource instances."""
        schools = InMemoryRepository(School)
        school = schools.insert(School(name="S", address="A", email="s@x.org"))
        instance = schools.lookup(school.id)
        assert instance is not None
        assert instance.kind == "school"
        assert instance.tenant_id == school.id
        schools.update(school.id, {"is_active": False})
        assert schools.lookup(school.id) is None
