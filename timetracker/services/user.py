"""
User Service
Business logic for administrative user management and role changes.
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import RecordNotFound, ValidationFailed
from timetracker.core.logging import get_audit_logger
from timetracker.core.rbac import ROLE_DISPLAY_NAMES, Role, display_name, parse_role, resolve_role
from timetracker.models.employee import Employee
from timetracker.models.user import User
from timetracker.repositories.employee import employee_repository
from timetracker.repositories.user import user_repository
from timetracker.schemas.user import RoleChangeResponse, UserListItem

logger = structlog.get_logger()

TEST_USER_PREFIX = "test."
TEST_USER_DOMAIN = "timetracker.local"


def test_user_email(role: Role) -> str:
    return f"{TEST_USER_PREFIX}{role.value.replace('_', '-')}@{TEST_USER_DOMAIN}"


class UserService:
    def _to_user_list_item(self, user: User) -> UserListItem:
        return UserListItem(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            role_display_name=display_name(resolve_role(user.role)),
            is_active=user.is_active,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )

    async def list_users(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        search: Optional[str] = None,
        role: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[UserListItem]:
        users = await user_repository.search(db, actor, search=search, role=role, skip=skip, limit=limit)
        return [self._to_user_list_item(user) for user in users]

    async def list_users_without_employee(self, db: AsyncSession, actor: ActorContext) -> List[UserListItem]:
        users = await user_repository.list_without_employee(db, actor)
        return [self._to_user_list_item(user) for user in users]

    async def change_role(
        self,
        db: AsyncSession,
        actor: ActorContext,
        user_id: UUID,
        requested_role: Optional[str],
    ) -> RoleChangeResponse:
        """
        Change a user's persisted role.

        The tag is parsed before anything is read or written, so an unknown
        tag leaves the database untouched.
        """
        new_role = parse_role(requested_role)

        if not scoping.can_change_roles(actor):
            raise user_repository.deny(actor, "user.change_role", user_id)

        # Unscoped: access was decided on the persisted role above
        target = await db.get(User, user_id)
        if target is None:
            raise RecordNotFound("User", user_id)

        if target.id == actor.user_id and new_role != Role.ADMIN:
            logger.warning("Admin attempted self-demotion", **actor.log_context(), requested_role=new_role.value)
            raise ValidationFailed("You cannot remove your own admin role")

        previous_role = target.role
        user = await user_repository.set_role(db, actor, target.id, new_role)

        get_audit_logger().info(
            "rbac.role_changed",
            **actor.log_context(),
            target_user_id=str(user.id),
            previous_role=previous_role,
            new_role=new_role.value,
        )
        return RoleChangeResponse(
            user_id=user.id,
            role=user.role,
            previous_role=previous_role,
            message=f"Role changed to {display_name(new_role)}",
        )

    async def link_user(
        self,
        db: AsyncSession,
        actor: ActorContext,
        employee_id: UUID,
        user_id: Optional[UUID],
    ) -> Employee:
        employee = await employee_repository.link_user(db, actor, employee_id, user_id)
        logger.info(
            "Employee user link updated",
            employee_id=str(employee.id),
            user_id=str(employee.user_id) if employee.user_id else None,
            actor_id=str(actor.user_id),
        )
        return employee

    async def create_test_users(self, db: AsyncSession, actor: ActorContext) -> List[UserListItem]:
        """Ensure one password-less test account exists per role"""
        created = []
        for role in Role:
            email = test_user_email(role)
            if await user_repository.get_by_email(db, email) is not None:
                continue
            user = await user_repository.create(
                db,
                actor,
                {
                    "email": email,
                    "first_name": "Test",
                    "last_name": ROLE_DISPLAY_NAMES[role],
                    "role": role.value,
                    "hashed_password": None,
                    "is_active": True,
                },
            )
            created.append(user)

        logger.info("Test users ensured", created=len(created), actor_id=str(actor.user_id))
        return await self.list_test_users(db, actor)

    async def list_test_users(self, db: AsyncSession, actor: ActorContext) -> List[UserListItem]:
        users = await user_repository.search(db, actor, search=TEST_USER_PREFIX, limit=len(Role) * 4)
        return [
            self._to_user_list_item(user)
            for user in users
            if user.email.startswith(TEST_USER_PREFIX) and user.email.endswith(f"@{TEST_USER_DOMAIN}")
        ]


user_service = UserService()
