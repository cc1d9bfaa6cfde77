"""Stored records for the school tree and user accounts.

These are Pydantic models handled by the repositories and the resource
services. Every record carries the id of the school (tenant) it belongs
to; a school's tenant id is its own id.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from .permissions.access import Principal, ResourceInstance
from .permissions.actions import Role
from .permissions.hierarchy import ResourceKinds


def _new_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """Base for stored records with soft-delete support."""

    kind: ClassVar[Optional[str]] = None

    id: str = Field(default_factory=_new_id)
    tenant_id: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def owner_chain(self) -> tuple[str, ...]:
        return ()

    def as_instance(self) -> ResourceInstance:
        """Resource instance view used for authorization and parent checks."""
        return ResourceInstance(
            kind=self.kind,
            tenant_id=self.tenant_id,
            id=self.id,
            owner_chain=self.owner_chain,
            active=self.is_active,
        )


class _EmailRecord(Record):
    email: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class School(_EmailRecord):
    """Tenant root."""

    kind: ClassVar[Optional[str]] = ResourceKinds.SCHOOL

    name: str
    address: str
    phone: Optional[str] = None
    admin_id: Optional[str] = None

    @model_validator(mode="after")
    def own_tenant(self) -> School:
        if self.tenant_id is None:
            self.tenant_id = self.id
        return self


class Classroom(Record):
    kind: ClassVar[Optional[str]] = ResourceKinds.CLASSROOM

    name: str
    capacity: Optional[int] = None
    resources: list[str] = Field(default_factory=list)

    @property
    def owner_chain(self) -> tuple[str, ...]:
        return (self.tenant_id,)


class Student(_EmailRecord):
    kind: ClassVar[Optional[str]] = ResourceKinds.STUDENT

    name: str
    classroom_id: Optional[str] = None

    @property
    def owner_chain(self) -> tuple[str, ...]:
        if self.classroom_id:
            return (self.tenant_id, self.classroom_id)
        return (self.tenant_id,)


class User(_EmailRecord):
    """Administrator account. Credentials live with the token issuer."""

    username: str
    role: Role

    def to_principal(self) -> Principal:
        return Principal(role=self.role, user_id=self.id, tenant_id=self.tenant_id)


__all__ = [
    "Classroom",
    "Record",
    "School",
    "Student",
    "User",
]
