"""
Task Endpoints
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
from timetracker.schemas.task import (
    TaskCloneRequest,
    TaskCreate,
    TaskResponse,
    TaskStatusEnum,
    TaskUpdate,
)
from timetracker.services.task import task_service

logger = structlog.get_logger()
router = APIRouter()


# Static paths are declared before /{task_id}


@router.get("/all", response_model=List[TaskResponse])
async def list_all_tasks(
    status_filter: Optional[TaskStatusEnum] = Query(None, alias="status"),
    actor: ActorContext = Depends(require_access("tasks.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Tasks of every project the caller can see."""
    return await task_service.list_all(
        db, actor, status=status_filter.value if status_filter else None
    )


@router.get("/selectable", response_model=List[TaskResponse])
async def list_selectable_tasks(
    project_id: Optional[UUID] = Query(None),
    actor: ActorContext = Depends(require_access("tasks.selectable")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Tasks that may receive new time entries: not archived, project active today."""
    return await task_service.list_selectable(db, actor, project_id=project_id)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    actor: ActorContext = Depends(
        require_access("tasks.create", required_permissions=[Capability.CREATE_TASKS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await task_service.create_task(db, actor, task_in)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID,
    actor: ActorContext = Depends(require_access("tasks.read")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await task_service.get_task(db, actor, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    task_in: TaskUpdate,
    actor: ActorContext = Depends(
        require_access("tasks.update", required_permissions=[Capability.EDIT_TASKS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await task_service.update_task(db, actor, task_id, task_in)


@router.delete("/{task_id}", response_model=SuccessResponse)
async def delete_task(
    task_id: UUID,
    actor: ActorContext = Depends(
        require_access("tasks.delete", required_permissions=[Capability.EDIT_TASKS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Delete a task; its time entries are kept without a task."""
    await task_service.delete_task(db, actor, task_id)
    return SuccessResponse(message="Task deleted successfully")


@router.post("/{task_id}/clone", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def clone_task(
    task_id: UUID,
    clone_in: TaskCloneRequest,
    actor: ActorContext = Depends(
        require_access("tasks.clone", required_permissions=[Capability.CREATE_TASKS])
    ),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await task_service.clone_task(db, actor, task_id, clone_in)
