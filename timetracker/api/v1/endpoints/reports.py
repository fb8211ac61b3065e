"""
Report Endpoints
Project time reports and CSV export
"""

import io
from datetime import date
from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import get_optional_actor
from timetracker.core.exceptions import AccessDenied, NotAuthenticated
from timetracker.core.guard import ACCESS_DENIED
from timetracker.core.timekeeping import check_date_range
from timetracker.schemas.dashboard import ProjectReport
from timetracker.services import report

logger = structlog.get_logger()
router = APIRouter()


def _raise_denied(actor: Optional[ActorContext], operation: str) -> None:
    if actor is None:
        raise NotAuthenticated()
    raise AccessDenied("Report access denied", operation=operation)


@router.get("/project-time-entries/{project_id}", response_model=ProjectReport)
async def get_project_time_entries(
    project_id: UUID,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    actor: Optional[ActorContext] = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Time entries of a project, limited to the entries the caller may see."""
    check_date_range(start_date, end_date)
    result = await report.project_time_entries(actor, db, project_id, start_date, end_date)
    if result is ACCESS_DENIED:
        _raise_denied(actor, "reports.project_time_entries")
    return result


@router.get("/time-entries/export")
async def export_time_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    project_id: Optional[UUID] = Query(None),
    actor: Optional[ActorContext] = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Export visible time entries as CSV."""
    check_date_range(start_date, end_date)
    content = await report.export_time_entries_csv(actor, db, start_date, end_date, project_id)
    if content is ACCESS_DENIED:
        _raise_denied(actor, "reports.export_time_entries")

    filename = f"time_entries_{start_date or 'all'}_{end_date or 'all'}.csv"
    return StreamingResponse(
        io.BytesIO(content.encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
