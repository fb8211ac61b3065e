"""
Role Testing Service
Lets a real admin view the application as another role
"""

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.config import settings
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import ValidationFailed
from timetracker.core.logging import get_audit_logger
from timetracker.core.rbac import parse_role
from timetracker.repositories.role_test import role_test_repository
from timetracker.schemas.user import RoleTestStatus

logger = structlog.get_logger()


class RoleTestingService:
    async def status(self, db: AsyncSession, actor: ActorContext) -> RoleTestStatus:
        can_test = actor.is_real_admin and settings.ROLE_TESTING_ENABLED
        session = await role_test_repository.current(db, actor) if can_test else None
        return RoleTestStatus(
            current_role=actor.role.value,
            real_role=actor.real_role.value,
            original_role=session.original_role if session else None,
            testing=session is not None,
            can_test=can_test,
            started_at=session.started_at if session else None,
        )

    async def start(self, db: AsyncSession, actor: ActorContext, requested_role: str) -> RoleTestStatus:
        test_role = parse_role(requested_role)
        if not settings.ROLE_TESTING_ENABLED:
            raise ValidationFailed("Role testing is disabled")

        session = await role_test_repository.start(db, actor, test_role)
        get_audit_logger().info(
            "rbac.role_test_started",
            **actor.log_context(),
            test_role=session.test_role,
        )
        return RoleTestStatus(
            current_role=session.test_role,
            real_role=actor.real_role.value,
            original_role=session.original_role,
            testing=True,
            can_test=True,
            started_at=session.started_at,
        )

    async def restore(self, db: AsyncSession, actor: ActorContext) -> RoleTestStatus:
        cleared = await role_test_repository.clear(db, actor)
        if cleared:
            get_audit_logger().info("rbac.role_test_ended", **actor.log_context())
        return RoleTestStatus(
            current_role=actor.real_role.value,
            real_role=actor.real_role.value,
            testing=False,
            can_test=actor.is_real_admin and settings.ROLE_TESTING_ENABLED,
        )


role_testing_service = RoleTestingService()
