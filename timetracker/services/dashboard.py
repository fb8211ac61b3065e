"""
Dashboard Service

Every figure is aggregated over the actor's time entry visibility scope, so an
admin's dashboard covers the whole company and an employee's covers only
their own entries.
"""

from datetime import date
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.timekeeping import check_date_range, dashboard_windows, today as app_today
from timetracker.repositories.project import project_repository
from timetracker.repositories.time_entry import time_entry_repository
from timetracker.schemas.dashboard import (
    DashboardStats,
    DepartmentHoursItem,
    ProjectBreakdownItem,
    RecentActivityItem,
)

logger = structlog.get_logger()


class DashboardService:
    def __init__(self):
        self.entries = time_entry_repository
        self.projects = project_repository

    async def get_stats(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        *,
        on: Optional[date] = None,
    ) -> DashboardStats:
        check_date_range(start_date, end_date)
        on = on or app_today()
        windows = dashboard_windows(on)

        today_hours = await self.entries.total_hours(db, actor, *windows["today"])
        week_hours = await self.entries.total_hours(db, actor, *windows["week"])
        month_hours = await self.entries.total_hours(db, actor, *windows["month"])
        active_projects = await self.projects.count_active(db, actor, today=on)
        totals = await self.entries.totals(db, actor, start_date, end_date)

        if start_date and end_date:
            days = (end_date - start_date).days + 1
            average = totals["total_hours"] / days
        else:
            average = week_hours / 7

        logger.debug("Dashboard stats computed", actor_id=str(actor.user_id), role=actor.role.value)
        return DashboardStats(
            today_hours=today_hours,
            week_hours=week_hours,
            month_hours=month_hours,
            active_projects=active_projects,
            average_hours_per_day=round(average, 2),
            start_date=start_date,
            end_date=end_date,
            **totals,
        )

    async def get_project_breakdown(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[ProjectBreakdownItem]:
        check_date_range(start_date, end_date)
        rows = await self.entries.project_breakdown(db, actor, start_date, end_date)
        total = sum(row["hours"] for row in rows)
        return [
            ProjectBreakdownItem(
                percentage=round(row["hours"] / total * 100, 1) if total else 0.0,
                **row,
            )
            for row in rows
        ]

    async def get_recent_activity(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 10,
    ) -> List[RecentActivityItem]:
        check_date_range(start_date, end_date)
        rows = await self.entries.recent_activity(
            db, actor, limit=limit, start_date=start_date, end_date=end_date
        )
        return [
            RecentActivityItem(
                id=entry.id,
                date=entry.date,
                duration=entry.duration,
                description=entry.description,
                project=project.name if project else None,
                task=task.name if task else None,
                user_email=user.email if user else None,
            )
            for entry, project, task, user in rows
        ]

    async def get_department_hours(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[DepartmentHoursItem]:
        check_date_range(start_date, end_date)
        rows = await self.entries.department_hours(db, actor, start_date, end_date)
        return [DepartmentHoursItem(**row) for row in rows]


dashboard_service = DashboardService()
