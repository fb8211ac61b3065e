"""
Employee Management Endpoints
"""

from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import require_access
from timetracker.core.rbac import Capability
from timetracker.schemas.base import SuccessResponse
from timetracker.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from timetracker.services.employee import employee_service

logger = structlog.get_logger()
router = APIRouter()

MANAGE_EMPLOYEES = [Capability.MANAGE_EMPLOYEES]


@router.get("", response_model=List[EmployeeResponse])
@router.get("/", response_model=List[EmployeeResponse])
async def list_employees(
    search: Optional[str] = Query(None, description="Search by name, email or employee number"),
    department: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    actor: ActorContext = Depends(require_access("employees.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    List employees visible to the caller

    Employees and viewers only see the profile linked to their own account.
    """
    return await employee_service.list_employees(
        db, actor, search=search, department=department, is_active=is_active, skip=skip, limit=limit
    )


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_in: EmployeeCreate,
    actor: ActorContext = Depends(
        require_access("employees.create", required_permissions=MANAGE_EMPLOYEES)
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await employee_service.create_employee(db, actor, employee_in)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: UUID,
    actor: ActorContext = Depends(require_access("employees.read")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await employee_service.get_employee(db, actor, employee_id)


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: UUID,
    employee_in: EmployeeUpdate,
    actor: ActorContext = Depends(
        require_access("employees.update", required_permissions=MANAGE_EMPLOYEES)
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Managers may only update employees of their own department."""
    return await employee_service.update_employee(db, actor, employee_id, employee_in)


@router.delete("/{employee_id}", response_model=SuccessResponse)
async def delete_employee(
    employee_id: UUID,
    actor: ActorContext = Depends(
        require_access("employees.delete", required_permissions=MANAGE_EMPLOYEES)
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    await employee_service.delete_employee(db, actor, employee_id)
    return SuccessResponse(message="Employee deleted successfully")
