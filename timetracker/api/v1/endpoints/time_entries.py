"""
Time Entry Endpoints
"""

from datetime import date
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import require_access
from timetracker.schemas.base import SuccessResponse
from timetracker.schemas.time_entry import TimeEntryCreate, TimeEntryResponse, TimeEntryUpdate
from timetracker.services.time_entry import time_entry_service

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=List[TimeEntryResponse])
@router.get("/", response_model=List[TimeEntryResponse])
async def list_time_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    project_id: Optional[UUID] = Query(None),
    user_id: Optional[UUID] = Query(None, description="Narrow to one user within the caller's scope"),
    skip: int = Query(0, ge=0),
    limit: int = Query(500, ge=1, le=5000),
    actor: ActorContext = Depends(require_access("time_entries.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    List time entries, newest first.

    Admins and managers see every entry; everyone else sees their own.
    """
    return await time_entry_service.list_entries(
        db,
        actor,
        start_date=start_date,
        end_date=end_date,
        project_id=project_id,
        user_id=user_id,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_time_entry(
    entry_in: TimeEntryCreate,
    actor: ActorContext = Depends(require_access("time_entries.create")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await time_entry_service.create_entry(db, actor, entry_in)


@router.get("/{entry_id}", response_model=TimeEntryResponse)
async def get_time_entry(
    entry_id: UUID,
    actor: ActorContext = Depends(require_access("time_entries.read")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await time_entry_service.get_entry(db, actor, entry_id)


@router.put("/{entry_id}", response_model=TimeEntryResponse)
async def update_time_entry(
    entry_id: UUID,
    entry_in: TimeEntryUpdate,
    actor: ActorContext = Depends(require_access("time_entries.update")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await time_entry_service.update_entry(db, actor, entry_id, entry_in)


@router.delete("/{entry_id}", response_model=SuccessResponse)
async def delete_time_entry(
    entry_id: UUID,
    actor: ActorContext = Depends(require_access("time_entries.delete")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    await time_entry_service.delete_entry(db, actor, entry_id)
    return SuccessResponse(message="Time entry deleted successfully")
