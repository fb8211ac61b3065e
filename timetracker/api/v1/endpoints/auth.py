"""
Authentication Endpoints
Login, token refresh and the current actor's auth context
"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import get_actor
from timetracker.schemas.auth import (
    CurrentRoleResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshTokenRequest,
    TokenResponse,
)
from timetracker.services.auth import auth_service

logger = structlog.get_logger()
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Authenticate user and return access tokens

    The token only identifies the user; role and permissions are resolved
    from the database on every request.
    """
    return await auth_service.login(db, login_data)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Exchange a refresh token for a new token pair"""
    return await auth_service.refresh(db, refresh_data.refresh_token)


@router.get("/me", response_model=MeResponse)
async def get_me(
    actor: ActorContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Current user profile plus role, permissions, navigation and controls"""
    return await auth_service.me(db, actor)


@router.get("/current-role", response_model=CurrentRoleResponse)
async def get_current_role(
    actor: ActorContext = Depends(get_actor)
) -> Any:
    return auth_service.current_role(actor)
