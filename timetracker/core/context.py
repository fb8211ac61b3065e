"""
Request-scoped actor context.

Built fresh for every request by the actor resolver and passed explicitly to
guards, services and repositories.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union
from uuid import UUID

from timetracker.core.rbac import (
    Capability,
    PermissionSet,
    Role,
    RolePredicates,
    get_permissions,
    get_role_predicates,
)


@dataclass(frozen=True)
class ActorContext:
    user_id: UUID
    email: str
    role: Role
    real_role: Role
    permissions: PermissionSet = field(default_factory=PermissionSet)
    department_id: Optional[UUID] = None
    organization_id: Optional[UUID] = None
    employee_id: Optional[UUID] = None
    is_role_test: bool = False

    @classmethod
    def for_role(
        cls,
        user_id: UUID,
        email: str,
        role: Role,
        *,
        real_role: Optional[Role] = None,
        department_id: Optional[UUID] = None,
        organization_id: Optional[UUID] = None,
        employee_id: Optional[UUID] = None,
    ) -> "ActorContext":
        real = real_role or role
        return cls(
            user_id=user_id,
            email=email,
            role=role,
            real_role=real,
            permissions=get_permissions(role),
            department_id=department_id,
            organization_id=organization_id,
            employee_id=employee_id,
            is_role_test=real != role,
        )

    def can(self, capability: Union[Capability, str]) -> bool:
        return self.permissions.allows(capability)

    @property
    def predicates(self) -> RolePredicates:
        return get_role_predicates(self.role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_real_admin(self) -> bool:
        return self.real_role == Role.ADMIN

    def log_context(self) -> dict:
        return {
            "actor_id": str(self.user_id),
            "role": self.role.value,
            "real_role": self.real_role.value,
        }
