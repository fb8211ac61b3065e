"""
Department Endpoints
"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import require_access
from timetracker.core.rbac import Capability
from timetracker.schemas.base import SuccessResponse
from timetracker.schemas.organization import (
    DepartmentCreate,
    DepartmentManagerRequest,
    DepartmentResponse,
    DepartmentUpdate,
)
from timetracker.services.organization import organization_service

router = APIRouter()

MANAGE_SYSTEM = [Capability.MANAGE_SYSTEM]


@router.get("", response_model=List[DepartmentResponse])
@router.get("/", response_model=List[DepartmentResponse])
async def list_departments(
    actor: ActorContext = Depends(require_access("departments.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.list_departments(db, actor)


@router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    department_in: DepartmentCreate,
    actor: ActorContext = Depends(require_access("departments.create", required_permissions=MANAGE_SYSTEM)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.create_department(db, actor, department_in)


@router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(
    department_id: UUID,
    actor: ActorContext = Depends(require_access("departments.read")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.get_department(db, actor, department_id)


@router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: UUID,
    department_in: DepartmentUpdate,
    actor: ActorContext = Depends(require_access("departments.update", required_permissions=MANAGE_SYSTEM)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.update_department(db, actor, department_id, department_in)


@router.delete("/{department_id}", response_model=SuccessResponse)
async def delete_department(
    department_id: UUID,
    actor: ActorContext = Depends(require_access("departments.delete", required_permissions=MANAGE_SYSTEM)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    await organization_service.delete_department(db, actor, department_id)
    return SuccessResponse(message="Department deleted successfully")


@router.post("/{department_id}/manager", response_model=DepartmentResponse)
async def set_department_manager(
    department_id: UUID,
    manager_in: DepartmentManagerRequest,
    actor: ActorContext = Depends(
        require_access("departments.set_manager", required_permissions=MANAGE_SYSTEM)
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.set_department_manager(db, actor, department_id, manager_in.employee_id)
