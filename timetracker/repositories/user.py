"""
User Repository
Scoped user reads plus the atomic role update
"""

from datetime import date
from typing import List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, or_
import structlog

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import Conflict, RecordNotFound
from timetracker.core.rbac import Role
from timetracker.models.base import utcnow
from timetracker.models.employee import Employee
from timetracker.models.user import User
from timetracker.repositories.base import ScopedRepository, as_uuid, ensure_actor

logger = structlog.get_logger()


class UserRepository(ScopedRepository[User]):
    """Repository for user database operations"""

    entity_name = "User"

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.user_visibility_clause(actor)

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """
        Identity lookup used before an actor exists (login and bootstrap).

        Not scoped: callers must never return the record to another user.
        """
        result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
        return result.scalar_one_or_none()

    async def record_login(self, db: AsyncSession, user: User) -> None:
        user.last_login_at = utcnow()
        await self._save(db, user)

    async def search(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        search: Optional[str] = None,
        role: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        ensure_actor(actor)
        query = self.scoped_query(actor, today=self._today(None))
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(User.email.ilike(pattern), User.first_name.ilike(pattern), User.last_name.ilike(pattern))
            )
        if role:
            query = query.where(User.role == role)
        query = query.order_by(User.email).offset(skip).limit(limit)
        return list((await db.execute(query)).scalars().all())

    async def list_without_employee(self, db: AsyncSession, actor: ActorContext) -> List[User]:
        """Visible users with no linked employee profile"""
        ensure_actor(actor)
        linked = select(Employee.user_id).where(Employee.user_id.is_not(None))
        query = self.scoped_query(actor, today=self._today(None)).where(User.id.not_in(linked))
        return list((await db.execute(query.order_by(User.email))).scalars().all())

    async def create(self, db: AsyncSession, actor: ActorContext, obj_in_data: dict) -> User:
        ensure_actor(actor)
        if not scoping.can_change_roles(actor):
            raise self.deny(actor, "user.create")
        if await self.get_by_email(db, obj_in_data["email"]) is not None:
            raise Conflict(f"User with email '{obj_in_data['email']}' already exists")
        return await self._insert(db, obj_in_data)

    async def set_role(
        self,
        db: AsyncSession,
        actor: ActorContext,
        user_id: Union[UUID, str],
        role: Role,
    ) -> User:
        """Single-statement role update; the caller has already validated `role`"""
        ensure_actor(actor)
        if not scoping.can_change_roles(actor):
            raise self.deny(actor, "user.change_role", user_id)

        target_id = as_uuid(user_id)
        if target_id is None:
            raise RecordNotFound("User", user_id)

        result = await db.execute(
            update(User)
            .where(User.id == target_id)
            .values(role=role.value, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            await db.rollback()
            raise RecordNotFound("User", user_id)

        await db.commit()
        user = await db.get(User, target_id, populate_existing=True)
        logger.info("User role updated", user_id=str(target_id), role=role.value, actor_id=str(actor.user_id))
        return user


user_repository = UserRepository(User)
