"""
Report Service
Per-project time reports and CSV export
"""

import csv
import io
from datetime import date
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.guard import AccessRequirement, guarded
from timetracker.core.rbac import Capability
from timetracker.core.timekeeping import today as app_today
from timetracker.models.employee import Employee
from timetracker.repositories.project import project_repository
from timetracker.repositories.time_entry import time_entry_repository
from timetracker.schemas.dashboard import ProjectReport, ProjectReportEntry

logger = structlog.get_logger()

VIEW_REPORTS = AccessRequirement.build(required_permissions=[Capability.VIEW_REPORTS])
EXPORT_DATA = AccessRequirement.build(required_permissions=[Capability.EXPORT_DATA])

CSV_COLUMNS = [
    "date", "start_time", "end_time", "duration", "project", "task",
    "user_email", "employee_name", "description",
]


async def _employee_names(db: AsyncSession, user_ids) -> dict:
    if not user_ids:
        return {}
    result = await db.execute(
        select(Employee.user_id, Employee.first_name, Employee.last_name).where(Employee.user_id.in_(list(user_ids)))
    )
    return {user_id: f"{first} {last}" for user_id, first, last in result.all()}


@guarded(VIEW_REPORTS, "reports.project_time_entries")
async def project_time_entries(
    actor: ActorContext,
    db: AsyncSession,
    project_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> ProjectReport:
    """Time entries of one project, limited to the entries the actor can see"""
    project = await project_repository.get_or_404(db, actor, project_id, today=app_today())
    rows = await time_entry_repository.list_detailed(
        db, actor, project_id=project.id, start_date=start_date, end_date=end_date, limit=10000
    )
    names = await _employee_names(db, {entry.user_id for entry, *_ in rows})

    entries = [
        ProjectReportEntry(
            id=entry.id,
            date=entry.date,
            start_time=entry.start_time,
            end_time=entry.end_time,
            duration=entry.duration,
            description=entry.description,
            task=task.name if task else None,
            user_email=user.email if user else None,
            employee_name=names.get(entry.user_id),
        )
        for entry, _project, task, user in rows
    ]
    return ProjectReport(
        project_id=project.id,
        project_name=project.name,
        total_hours=round(sum(e.duration for e in entries), 2),
        entries=entries,
    )


@guarded(EXPORT_DATA, "reports.export_time_entries")
async def export_time_entries_csv(
    actor: ActorContext,
    db: AsyncSession,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    project_id: Optional[UUID] = None,
) -> str:
    rows = await time_entry_repository.list_detailed(
        db, actor, start_date=start_date, end_date=end_date, project_id=project_id, limit=100000
    )
    names = await _employee_names(db, {entry.user_id for entry, *_ in rows})

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for entry, project, task, user in rows:
        writer.writerow([
            entry.date.isoformat(), entry.start_time, entry.end_time, f"{entry.duration:.2f}",
            project.name if project else "", task.name if task else "",
            user.email if user else "", names.get(entry.user_id, ""), entry.description or "",
        ])

    logger.info("Time entries exported", rows=len(rows), actor_id=str(actor.user_id))
    return output.getvalue()
