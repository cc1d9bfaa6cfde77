"""Referential integrity between parent and child resources.

Every resource's tenant id equals its parent's tenant id, transitively
up to the root. ``check_parentage()`` enforces this whenever a resource
is created under, or moved to, another resource. Run it after
authorization succeeds and before the mutation is persisted.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..exceptions import ParentNotFoundError, TenantMismatchError
from .access import ResourceInstance, normalize_tenant_id

logger = logging.getLogger(__name__)

ParentLookup = Callable[[str], Optional[ResourceInstance]]
"""Fetch a parent by id; the storage collaborator returns only active rows."""


def check_parentage(child_tenant_id: Any, declared_parent_id: Any, lookup: ParentLookup) -> None:
    """Verify ``declared_parent_id`` is a valid parent for a child in ``child_tenant_id``.

    Raises:
        ParentNotFoundError: Parent id missing, not found, or inactive.
        TenantMismatchError: Parent belongs to another tenant.

    Both errors carry the same public message.

    Example::

        check_parentage(student_tenant, classroom_id, classrooms.lookup)
    """
    if declared_parent_id is None or declared_parent_id == "":
        raise ParentNotFoundError(parent_id=declared_parent_id)

    parent = lookup(str(declared_parent_id))
    if parent is None or not parent.active:
        logger.info("Parent %s not found or inactive", declared_parent_id)
        raise ParentNotFoundError(parent_id=str(declared_parent_id))

    if parent.tenant_id != normalize_tenant_id(child_tenant_id):
        logger.info(
            "Parent %s %s belongs to tenant %s, child declared tenant %s",
            parent.kind,
            declared_parent_id,
            parent.tenant_id,
            child_tenant_id,
        )
        raise TenantMismatchError(parent_id=str(declared_parent_id), kind=parent.kind)


__all__ = [
    "ParentLookup",
    "check_parentage",
]
