"""
Administration Endpoints
User management, role changes and admin role testing
"""

from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import require_access, require_real_admin
from timetracker.core.rbac import Role
from timetracker.schemas.employee import EmployeeResponse
from timetracker.schemas.user import (
    LinkUserRequest,
    RoleChangeRequest,
    RoleChangeResponse,
    RoleTestRequest,
    RoleTestStatus,
    UserListItem,
)
from timetracker.services.role_testing import role_testing_service
from timetracker.services.user import user_service

logger = structlog.get_logger()
router = APIRouter()

ADMIN_ONLY = [Role.ADMIN]


# ==================== Users ====================


@router.get("/users", response_model=List[UserListItem])
async def list_users(
    search: Optional[str] = Query(None, description="Search by email or name"),
    role: Optional[str] = Query(None, description="Filter by role tag"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    actor: ActorContext = Depends(require_access("admin.users.list", required_roles=ADMIN_ONLY)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_service.list_users(db, actor, search=search, role=role, skip=skip, limit=limit)


@router.get("/users/without-employee", response_model=List[UserListItem])
async def list_users_without_employee(
    actor: ActorContext = Depends(
        require_access("admin.users.without_employee", required_roles=ADMIN_ONLY)
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Accounts that are not linked to an employee profile yet."""
    return await user_service.list_users_without_employee(db, actor)


@router.post("/users/{user_id}/role", response_model=RoleChangeResponse)
async def change_user_role(
    user_id: UUID,
    role_in: RoleChangeRequest,
    actor: ActorContext = Depends(require_real_admin("admin.users.change_role")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Change a user's persisted role.

    Unknown role tags are rejected with 400 before anything is written. The
    new role applies from the target user's next request.
    """
    return await user_service.change_role(db, actor, user_id, role_in.role)


@router.post("/employees/{employee_id}/link-user", response_model=EmployeeResponse)
async def link_employee_user(
    employee_id: UUID,
    link_in: LinkUserRequest,
    actor: ActorContext = Depends(require_access("admin.employees.link_user", required_roles=ADMIN_ONLY)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_service.link_user(db, actor, employee_id, link_in.user_id)


# ==================== Role Testing ====================


@router.post("/test-role", response_model=RoleTestStatus)
async def start_role_test(
    test_in: RoleTestRequest,
    actor: ActorContext = Depends(require_real_admin("admin.role_test.start")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Act as another role until restored. The persisted role is unchanged."""
    return await role_testing_service.start(db, actor, test_in.role)


@router.post("/restore-role", response_model=RoleTestStatus)
async def restore_role(
    actor: ActorContext = Depends(require_real_admin("admin.role_test.restore")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await role_testing_service.restore(db, actor)


@router.get("/test-status", response_model=RoleTestStatus)
async def get_role_test_status(
    actor: ActorContext = Depends(require_access("admin.role_test.status")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await role_testing_service.status(db, actor)


@router.post("/test-users", response_model=List[UserListItem], status_code=status.HTTP_201_CREATED)
async def create_test_users(
    actor: ActorContext = Depends(require_real_admin("admin.test_users.create")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Ensure one password-less test account per role exists."""
    return await user_service.create_test_users(db, actor)


@router.get("/test-users", response_model=List[UserListItem])
async def list_test_users(
    actor: ActorContext = Depends(require_access("admin.test_users.list", required_roles=ADMIN_ONLY)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_service.list_test_users(db, actor)
