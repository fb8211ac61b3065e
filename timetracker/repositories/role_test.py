"""
Role Test Repository
Persistence for admin "act as role" sessions
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.rbac import Role
from timetracker.models.base import utcnow
from timetracker.models.role_test import RoleTestSession
from timetracker.repositories.base import ScopedRepository, ensure_actor

logger = structlog.get_logger()


class RoleTestRepository(ScopedRepository[RoleTestSession]):
    """Sessions are always keyed by the acting user; nobody reads another user's session"""

    entity_name = "Role test session"

    def visibility_clause(self, actor: ActorContext, *, today):
        return RoleTestSession.user_id == actor.user_id

    async def current(self, db: AsyncSession, actor: ActorContext) -> Optional[RoleTestSession]:
        ensure_actor(actor)
        result = await db.execute(select(RoleTestSession).where(RoleTestSession.user_id == actor.user_id))
        return result.scalar_one_or_none()

    async def start(self, db: AsyncSession, actor: ActorContext, test_role: Role) -> RoleTestSession:
        ensure_actor(actor)
        if not actor.is_real_admin:
            raise self.deny(actor, "role_test.start")

        session = await self.current(db, actor)
        if session is None:
            session = RoleTestSession(user_id=actor.user_id, original_role=actor.real_role.value)
        session.test_role = test_role.value
        session.started_at = utcnow()
        return await self._save(db, session)

    async def clear(self, db: AsyncSession, actor: ActorContext) -> bool:
        ensure_actor(actor)
        result = await db.execute(delete(RoleTestSession).where(RoleTestSession.user_id == actor.user_id))
        await db.commit()
        return bool(result.rowcount)


role_test_repository = RoleTestRepository(RoleTestSession)
