"""
Authentication Service
Login, token refresh and the auth context served to the client
"""

import asyncio
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.exceptions import NotAuthenticated
from timetracker.core.guard import build_ui_affordances
from timetracker.core.rbac import display_name
from timetracker.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    create_refresh_token,
    verify_password,
    verify_token,
)
from timetracker.models.user import User
from timetracker.repositories.base import as_uuid
from timetracker.repositories.role_test import role_test_repository
from timetracker.repositories.user import user_repository
from timetracker.schemas.auth import (
    AuthContext,
    CurrentRoleResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RoleTestState,
    TokenResponse,
    UserProfile,
)

logger = structlog.get_logger()


def _issue_tokens(user: User) -> TokenResponse:
    expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return TokenResponse(
        access_token=create_access_token(
            subject=str(user.id),
            expires_delta=expires,
            additional_claims={"email": user.email},
        ),
        refresh_token=create_refresh_token(subject=str(user.id)),
        token_type="bearer",
        expires_in=int(expires.total_seconds()),
    )


class AuthService:
    async def login(self, db: AsyncSession, login_data: LoginRequest) -> LoginResponse:
        user = await user_repository.get_by_email(db, login_data.email)
        if not user:
            logger.warning("Login attempt with non-existent email", email=login_data.email)
            raise NotAuthenticated("Invalid email or password")

        # bcrypt is CPU bound
        password_valid = await asyncio.to_thread(verify_password, login_data.password, user.hashed_password)
        if not password_valid:
            logger.warning("Login attempt with invalid password", email=login_data.email, user_id=str(user.id))
            raise NotAuthenticated("Invalid email or password")

        if not user.is_active:
            logger.warning("Login attempt by inactive user", email=login_data.email, user_id=str(user.id))
            raise NotAuthenticated("Account is inactive")

        tokens = _issue_tokens(user)
        await user_repository.record_login(db, user)

        logger.info("User logged in successfully", email=user.email, user_id=str(user.id))
        return LoginResponse(user=UserProfile.model_validate(user), tokens=tokens)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        subject = verify_token(refresh_token, token_type="refresh")
        user_id = as_uuid(subject)
        user = await db.get(User, user_id) if user_id else None
        if user is None or not user.is_active:
            raise NotAuthenticated("User not found or inactive")
        return _issue_tokens(user)

    async def build_context(self, db: AsyncSession, actor: ActorContext) -> AuthContext:
        affordances = build_ui_affordances(actor)
        session = await role_test_repository.current(db, actor) if actor.is_real_admin else None
        role_test = RoleTestState(
            active=actor.is_role_test,
            original_role=session.original_role if session and actor.is_role_test else None,
            test_role=session.test_role if session and actor.is_role_test else None,
            started_at=session.started_at if session and actor.is_role_test else None,
        )
        return AuthContext(
            role=actor.role.value,
            real_role=actor.real_role.value,
            role_display_name=display_name(actor.role),
            permissions=actor.permissions.to_dict(),
            predicates=actor.predicates.to_dict(),
            navigation=affordances["navigation"],
            controls=affordances["controls"],
            role_test=role_test,
            department_id=actor.department_id,
            organization_id=actor.organization_id,
            employee_id=actor.employee_id,
        )

    async def me(self, db: AsyncSession, actor: ActorContext) -> MeResponse:
        user = await user_repository.get_or_404(db, actor, actor.user_id)
        return MeResponse(user=UserProfile.model_validate(user), auth=await self.build_context(db, actor))

    def current_role(self, actor: ActorContext) -> CurrentRoleResponse:
        return CurrentRoleResponse(
            role=actor.role.value,
            real_role=actor.real_role.value,
            role_display_name=display_name(actor.role),
            is_role_test=actor.is_role_test,
            permissions=actor.permissions.to_dict(),
        )


auth_service = AuthService()
