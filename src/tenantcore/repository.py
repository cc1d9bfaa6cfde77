"""Storage contract used by the resource services.

``Repository`` abstracts a document store: records are fetched with
plain field → value queries (``{"field": {"$ne": value}}`` and
``{"field": {"$in": [...]}}`` are also understood). Scope predicates are
turned into such queries, so tenant filtering happens inside the store.

``InMemoryRepository`` is the reference implementation. It enforces its
unique constraints at write time under a lock, so the second of two racing
writers fails with :class:`ConflictError` even if both passed the
service-level existence check. Reads and writes hand out copies, so
records only change through ``update``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

from .exceptions import ConflictError
from .models import Record
from .permissions.access import ResourceInstance

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

Query = Mapping[str, Any]


@dataclass(frozen=True)
class UniqueConstraint:
    """Fields whose combined value must be unique.

    Args:
        fields: Record fields forming the key.
        active_only: Only active records take part (names reusable after
            a soft delete).
    """

    fields: tuple[str, ...]
    active_only: bool = False

    def key(self, record: Record) -> tuple[Any, ...]:
        return tuple(getattr(record, f, None) for f in self.fields)

    def applies_to(self, record: Record) -> bool:
        return record.is_active or not self.active_only


class Repository(ABC, Generic[R]):
    """Document store for one record type."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[R]:
        """Record by id regardless of its active flag, None when absent."""

    @abstractmethod
    def find(self, query: Query) -> list[R]:
        raise NotImplementedError

    def find_one(self, query: Query) -> Optional[R]:
        results = self.find(query)
        return results[0] if results else None

    @abstractmethod
    def insert(self, record: R) -> R:
        raise NotImplementedError

    @abstractmethod
    def update(self, record_id: str, changes: Mapping[str, Any]) -> Optional[R]:
        raise NotImplementedError

    def lookup(self, record_id: str) -> Optional[ResourceInstance]:
        """Active record as a resource instance; the parent-lookup contract."""
        record = self.get(record_id)
        if record is None or not record.is_active:
            return None
        return record.as_instance()


def _matches(record: Record, query: Query) -> bool:
    for field_name, expected in query.items():
        value = getattr(record, field_name, None)
        if isinstance(expected, Mapping):
            if "$ne" in expected and value == expected["$ne"]:
                return False
            if "$in" in expected and value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


class InMemoryRepository(Repository[R]):
    """Thread-safe in-process store.

    Example::

        students = InMemoryRepository(Student, unique=[UniqueConstraint(("email",))])
        students.insert(Student(name="Ada", email="ada@example.org", tenant_id=school.id))
        students.find({"tenant_id": school.id, "is_active": True})
    """

    def __init__(
        self,
        record_type: type[R],
        unique: Iterable[UniqueConstraint] = (),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.record_type = record_type
        self.unique = tuple(unique)
        self._clock = clock
        self._records: dict[str, R] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: str) -> Optional[R]:
        with self._lock:
            record = self._records.get(str(record_id))
            return record.model_copy(deep=True) if record is not None else None

    def find(self, query: Query) -> list[R]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values() if _matches(r, query)]

    def insert(self, record: R) -> R:
        with self._lock:
            if record.id in self._records:
                raise ConflictError(f"{self.record_type.__name__.lower()} {record.id} already exists", id=record.id)
            self._check_unique(record)
            self._records[record.id] = record.model_copy(deep=True)
        logger.debug("Inserted %s %s", self.record_type.__name__, record.id)
        return record

    def update(self, record_id: str, changes: Mapping[str, Any]) -> Optional[R]:
        with self._lock:
            current = self._records.get(str(record_id))
            if current is None:
                return None
            data = current.model_dump()
            data.update(changes)
            data["updated_at"] = self._clock()
            updated = self.record_type.model_validate(data)
            self._check_unique(updated)
            self._records[updated.id] = updated
            return updated.model_copy(deep=True)

    def _check_unique(self, record: R) -> None:
        # Caller holds the lock
        for constraint in self.unique:
            if not constraint.applies_to(record):
                continue
            key = constraint.key(record)
            for other in self._records.values():
                if other.id == record.id or not constraint.applies_to(other):
                    continue
                if constraint.key(other) == key:
                    fields = ", ".join(constraint.fields)
                    raise ConflictError(
                        f"{self.record_type.__name__.lower()} with this {fields} already exists",
                        fields=constraint.fields,
                    )


__all__ = [
    "InMemoryRepository",
    "Query",
    "Repository",
    "UniqueConstraint",
]
