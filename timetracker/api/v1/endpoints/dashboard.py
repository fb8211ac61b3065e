"""
Dashboard Endpoints
Aggregates over exactly the time entries the caller can see
"""

from datetime import date
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import require_access
from timetracker.schemas.dashboard import (
    DashboardStats,
    DepartmentHoursItem,
    ProjectBreakdownItem,
    RecentActivityItem,
)
from timetracker.services.dashboard import dashboard_service

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: ActorContext = Depends(require_access("dashboard.stats")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await dashboard_service.get_stats(db, actor, start_date, end_date)


@router.get("/project-breakdown", response_model=List[ProjectBreakdownItem])
async def get_project_breakdown(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: ActorContext = Depends(require_access("dashboard.project_breakdown")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await dashboard_service.get_project_breakdown(db, actor, start_date, end_date)


@router.get("/recent-activity", response_model=List[RecentActivityItem])
async def get_recent_activity(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    actor: ActorContext = Depends(require_access("dashboard.recent_activity")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await dashboard_service.get_recent_activity(db, actor, start_date, end_date, limit=limit)


@router.get("/department-hours", response_model=List[DepartmentHoursItem])
async def get_department_hours(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: ActorContext = Depends(require_access("dashboard.department_hours")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await dashboard_service.get_department_hours(db, actor, start_date, end_date)
