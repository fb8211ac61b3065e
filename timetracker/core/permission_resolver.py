"""
Actor resolver seam.

Turns an authenticated User into the request-scoped ActorContext. The default
resolver reads everything from the database on every request; a claim-backed
resolver for an external identity provider can be swapped in without touching
call sites.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.config import settings
from timetracker.core.context import ActorContext
from timetracker.core.rbac import Role, resolve_role
from timetracker.models.employee import Employee
from timetracker.models.organization import Department
from timetracker.models.role_test import RoleTestSession

logger = structlog.get_logger()


def _as_uuid(value: Any) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class ActorResolver(ABC):
    @abstractmethod
    async def resolve(self, db: AsyncSession, user: Any) -> ActorContext:
        raise NotImplementedError


class DBActorResolver(ActorResolver):
    async def resolve(self, db: AsyncSession, user: Any) -> ActorContext:
        # Role always comes from the database
        real_role = resolve_role(user.role)

        employee_id = department_id = organization_id = None
        employee = (
            await db.execute(select(Employee).where(Employee.user_id == user.id))
        ).scalar_one_or_none()
        if employee is not None:
            employee_id = employee.id
            dept_uuid = _as_uuid(employee.department)
            if dept_uuid is not None:
                department = await db.get(Department, dept_uuid)
                if department is not None:
                    department_id = department.id
                    organization_id = department.organization_id

        role = await self._effective_role(db, user.id, real_role)

        return ActorContext.for_role(
            user_id=user.id,
            email=user.email,
            role=role,
            real_role=real_role,
            department_id=department_id,
            organization_id=organization_id,
            employee_id=employee_id,
        )

    async def _effective_role(self, db: AsyncSession, user_id: UUID, real_role: Role) -> Role:
        session = (
            await db.execute(select(RoleTestSession).where(RoleTestSession.user_id == user_id))
        ).scalar_one_or_none()
        if session is None:
            return real_role

        if real_role != Role.ADMIN or not settings.ROLE_TESTING_ENABLED:
            logger.warning(
                "Ignoring role test session for non-admin user",
                user_id=str(user_id),
                real_role=real_role.value,
                test_role=session.test_role,
            )
            return real_role

        test_role = resolve_role(session.test_role)
        logger.debug("Role test active", user_id=str(user_id), test_role=test_role.value)
        return test_role


actor_resolver: ActorResolver = DBActorResolver()
