"""
Bootstrap admin creation service.

Runs on every startup. It creates the configured admin account only while the
system has no active admin, and never changes the role of an existing account.
"""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timetracker.core.config import settings
from timetracker.core.logging import get_audit_logger
from timetracker.core.rbac import Role
from timetracker.core.security import get_password_hash
from timetracker.models.user import User
from timetracker.repositories.user import user_repository

logger = structlog.get_logger()


async def _has_active_admin(db: AsyncSession) -> bool:
    result = await db.execute(
        select(User.id).where(User.role == Role.ADMIN.value, User.is_active == True).limit(1)
    )
    return result.first() is not None


async def ensure_bootstrap_admin_exists(db: AsyncSession) -> Optional[User]:
    if not settings.BOOTSTRAP_ADMIN_PASSWORD:
        logger.info("Bootstrap admin disabled")
        return None

    admin_email = settings.BOOTSTRAP_ADMIN_EMAIL.lower().strip()
    existing = await user_repository.get_by_email(db, admin_email)
    if existing:
        if existing.role != Role.ADMIN.value:
            logger.warning(
                "Bootstrap account exists without the admin role; leaving it unchanged",
                email=admin_email,
                role=existing.role,
            )
        return existing

    if await _has_active_admin(db):
        logger.info("Active admin present, bootstrap account not created", email=admin_email)
        return None

    bootstrap_user = User(
        email=admin_email,
        first_name=settings.BOOTSTRAP_ADMIN_FIRST_NAME,
        last_name=settings.BOOTSTRAP_ADMIN_LAST_NAME,
        hashed_password=get_password_hash(settings.BOOTSTRAP_ADMIN_PASSWORD),
        role=Role.ADMIN.value,
        is_active=True,
    )
    db.add(bootstrap_user)
    await db.commit()
    await db.refresh(bootstrap_user)

    get_audit_logger().info("rbac.bootstrap_admin_created", email=admin_email, user_id=str(bootstrap_user.id))
    return bootstrap_user
