"""
FastAPI Dependencies
Authentication, actor resolution and guard dependencies
"""

from typing import Iterable, Optional, Union
from uuid import UUID

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.exceptions import AccessDenied, NotAuthenticated
from timetracker.core.guard import GATE_ROLE, AccessRequirement, MatchMode, authorize
from timetracker.core.logging import get_audit_logger
from timetracker.core.permission_resolver import actor_resolver
from timetracker.core.rbac import Capability, Role
from timetracker.core.security import verify_token
from timetracker.models.user import User

logger = structlog.get_logger()

# Security scheme
security = HTTPBearer(auto_error=False)


async def _load_active_user(db: AsyncSession, subject: str) -> Optional[User]:
    try:
        user_id = UUID(subject)
    except ValueError:
        return None
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.is_active == True
        )
    )
    return result.scalar_one_or_none()


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> User:
    """
    Get current authenticated user from the bearer token

    Raises:
        NotAuthenticated: If the token is missing or invalid, or the user is
            unknown or inactive
    """
    if not credentials:
        logger.warning("Missing authentication credentials")
        raise NotAuthenticated("Missing authentication credentials")

    subject = verify_token(credentials.credentials, token_type="access")

    user = await _load_active_user(db, subject)
    if not user:
        logger.warning("User not found or inactive", user_id=subject)
        raise NotAuthenticated("User not found or inactive")

    logger.debug("User authenticated successfully", user_id=subject, email=user.email)
    return user


async def get_actor(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> ActorContext:
    """Resolve the request's actor; role and scope are re-read on every request"""
    return await actor_resolver.resolve(db, current_user)


async def get_optional_actor(
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[ActorContext]:
    """Actor if authenticated, None otherwise"""
    if not credentials:
        return None

    try:
        subject = verify_token(credentials.credentials, token_type="access")
    except NotAuthenticated:
        return None

    user = await _load_active_user(db, subject)
    if user is None:
        return None
    return await actor_resolver.resolve(db, user)


def require_access(
    operation: str,
    *,
    required_roles: Iterable[Union[Role, str]] = (),
    required_permissions: Iterable[Union[Capability, str]] = (),
    block_roles: Iterable[Union[Role, str]] = (),
    match: MatchMode = "all",
):
    """
    Dependency factory guarding an endpoint

    Unauthenticated requests get 401; role or permission denials surface as
    404 so the response does not reveal that the resource exists.
    """
    requirement = AccessRequirement.build(
        required_roles=required_roles,
        required_permissions=required_permissions,
        block_roles=block_roles,
        match=match,
    )

    async def access_checker(
        actor: Optional[ActorContext] = Depends(get_optional_actor)
    ) -> ActorContext:
        return authorize(actor, requirement, operation)

    access_checker.requirement = requirement
    return access_checker


def require_real_admin(operation: str):
    """
    Dependency factory for operations gated on the persisted role

    Role changes and role testing stay available to an admin while they act
    as another role.
    """

    async def real_admin_checker(
        actor: ActorContext = Depends(get_actor)
    ) -> ActorContext:
        if not actor.is_real_admin:
            get_audit_logger().warning(
                "authz.denied",
                operation=operation,
                gate=GATE_ROLE,
                reason=f"persisted role {actor.real_role.value} is not admin",
                **actor.log_context(),
            )
            raise AccessDenied("Admin role required", operation=operation, gate=GATE_ROLE)
        return actor

    return real_admin_checker
