"""Administrator accounts.

Only account records live here. Password hashing, login and token
issuance belong to the host service.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..engine import AuthorizationEngine
from ..exceptions import ConflictError, ForbiddenError, ValidationError
from ..models import School, User
from ..permissions.access import Principal
from ..permissions.actions import Role
from ..repository import Repository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, engine: AuthorizationEngine, repository: Repository[User], schools: Repository[School]) -> None:
        self.engine = engine
        self.repository = repository
        self.schools = schools

    def create_user(
        self,
        principal: Principal,
        *,
        username: str,
        email: str,
        role: str | Role,
        school_id: Optional[str] = None,
    ) -> User:
        """Create an administrator account.

        Superadmin only. A school admin must be attached to an existing,
        active school; a superadmin is never attached to one.
        """
        if not principal.is_global_admin:
            raise ForbiddenError("forbidden: only superadmin can create users")

        role = Role.parse(role)
        if role is Role.TENANT_ADMIN:
            if not school_id:
                raise ValidationError("schoolId is required when creating a school_admin")
            self.engine.check_parentage(school_id, school_id, self.schools.lookup)
        else:
            school_id = None

        email = email.strip().lower()
        if self.repository.find_one({"email": email}) is not None:
            raise ConflictError("email already in use", field="email")
        if self.repository.find_one({"username": username}) is not None:
            raise ConflictError("username already in use", field="username")

        user = self.repository.insert(User(username=username, email=email, role=role, tenant_id=school_id))
        logger.info(
            "Created %s account %s",
            role.value,
            user.id,
            extra={"user_id": principal.user_id, "tenant_id": school_id},
        )
        return user


__all__ = ["UserService"]
