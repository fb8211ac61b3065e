"""
Project Management Endpoints
Project CRUD, employee assignment and project tasks
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
from timetracker.schemas.employee import EmployeeResponse
from timetracker.schemas.project import (
    ProjectCreate,
    ProjectEmployeeAssign,
    ProjectEmployeeResponse,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from timetracker.schemas.task import TaskResponse
from timetracker.services.project import project_service

logger = structlog.get_logger()
router = APIRouter()


# ==================== CRUD ====================


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    actor: ActorContext = Depends(
        require_access("projects.create", required_permissions=[Capability.CREATE_PROJECTS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Create a new project."""
    return await project_service.create_project(db, actor, project_in)


@router.get("", response_model=ProjectListResponse)
@router.get("/", response_model=ProjectListResponse)
async def list_projects(
    search: Optional[str] = Query(None, description="Search in name, number and description"),
    status_filter: Optional[str] = Query(
        None, alias="status", pattern="^(active|upcoming|ended)$", description="Filter by date-window status"
    ),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    sort_by: str = Query("name", description="Sort field"),
    sort_order: str = Query("asc", description="asc or desc"),
    actor: ActorContext = Depends(require_access("projects.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    List projects visible to the caller.

    Actors without canViewAllProjects only see projects active today. The
    response carries the project controls the client should render.
    """
    return await project_service.list_projects(
        db,
        actor,
        search=search,
        status=status_filter,
        skip=skip,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    actor: ActorContext = Depends(require_access("projects.read")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await project_service.get_project(db, actor, project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    project_in: ProjectUpdate,
    actor: ActorContext = Depends(
        require_access("projects.update", required_permissions=[Capability.EDIT_PROJECTS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Update a project. Editing is role-global, not owner-scoped."""
    return await project_service.update_project(db, actor, project_id, project_in)


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: UUID,
    actor: ActorContext = Depends(
        require_access("projects.delete", required_permissions=[Capability.DELETE_PROJECTS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Delete a project with its tasks, time entries and assignments."""
    await project_service.delete_project(db, actor, project_id)
    return SuccessResponse(message="Project deleted successfully")


# ==================== Employee Assignment ====================


@router.get("/{project_id}/employees", response_model=List[EmployeeResponse])
async def list_project_employees(
    project_id: UUID,
    actor: ActorContext = Depends(require_access("projects.employees.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await project_service.list_project_employees(db, actor, project_id)


@router.post(
    "/{project_id}/employees",
    response_model=ProjectEmployeeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_employee(
    project_id: UUID,
    assign_in: ProjectEmployeeAssign,
    actor: ActorContext = Depends(
        require_access("projects.employees.assign", required_permissions=[Capability.EDIT_PROJECTS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await project_service.assign_employee(db, actor, project_id, assign_in.employee_id)


@router.delete("/{project_id}/employees/{employee_id}", response_model=SuccessResponse)
async def unassign_employee(
    project_id: UUID,
    employee_id: UUID,
    actor: ActorContext = Depends(
        require_access("projects.employees.unassign", required_permissions=[Capability.EDIT_PROJECTS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    await project_service.unassign_employee(db, actor, project_id, employee_id)
    return SuccessResponse(message="Employee removed from project")


# ==================== Tasks ====================


@router.get("/{project_id}/tasks", response_model=List[TaskResponse])
async def list_project_tasks(
    project_id: UUID,
    actor: ActorContext = Depends(require_access("projects.tasks.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await project_service.list_project_tasks(db, actor, project_id)
