"""
Time Entry Service
Duration derivation and scoped time entry operations
"""

from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.exceptions import ValidationFailed
from timetracker.core.timekeeping import calculate_duration, derive_times, today as app_today
from timetracker.models.project import Project
from timetracker.models.task import Task
from timetracker.models.time_entry import TimeEntry
from timetracker.models.user import User
from timetracker.repositories.time_entry import time_entry_repository
from timetracker.schemas.time_entry import TimeEntryCreate, TimeEntryResponse, TimeEntryUpdate

logger = structlog.get_logger()


def to_time_entry_response(
    entry: TimeEntry,
    project: Optional[Project] = None,
    task: Optional[Task] = None,
    user: Optional[User] = None,
) -> TimeEntryResponse:
    return TimeEntryResponse(
        id=entry.id,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        user_id=entry.user_id,
        project_id=entry.project_id,
        task_id=entry.task_id,
        description=entry.description,
        date=entry.date,
        start_time=entry.start_time,
        end_time=entry.end_time,
        duration=entry.duration,
        project_name=project.name if project else None,
        project_color=project.color if project else None,
        task_name=task.name if task else None,
        user_email=user.email if user else None,
    )


def resolve_times(
    start_time: Optional[str],
    end_time: Optional[str],
    duration: Optional[float],
) -> Tuple[str, str, float]:
    """Start, end and duration from either explicit times or a manual duration"""
    if end_time is not None:
        start = start_time or end_time
        return start, end_time, calculate_duration(start, end_time)
    # Manual durations are stored as entered
    hours = round(duration, 2)
    if hours <= 0:
        raise ValidationFailed("Duration must be at least 0.01 hours")
    start, end = derive_times(hours, start_time)
    return start, end, hours


class TimeEntryService:
    def __init__(self):
        self.repository = time_entry_repository

    async def _detailed(self, db: AsyncSession, actor: ActorContext, entry: TimeEntry) -> TimeEntryResponse:
        project = await db.get(Project, entry.project_id)
        task = await db.get(Task, entry.task_id) if entry.task_id else None
        user = await db.get(User, entry.user_id)
        return to_time_entry_response(entry, project, task, user)

    async def list_entries(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        project_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 500,
    ) -> List[TimeEntryResponse]:
        rows = await self.repository.list_detailed(
            db,
            actor,
            start_date=start_date,
            end_date=end_date,
            project_id=project_id,
            user_id=user_id,
            skip=skip,
            limit=limit,
        )
        return [to_time_entry_response(*row) for row in rows]

    async def get_entry(self, db: AsyncSession, actor: ActorContext, entry_id: UUID) -> TimeEntryResponse:
        entry = await self.repository.get_or_404(db, actor, entry_id)
        return await self._detailed(db, actor, entry)

    async def create_entry(
        self, db: AsyncSession, actor: ActorContext, entry_in: TimeEntryCreate
    ) -> TimeEntryResponse:
        start, end, duration = resolve_times(entry_in.start_time, entry_in.end_time, entry_in.duration)
        data = entry_in.model_dump(exclude={"start_time", "end_time", "duration"})
        data.update(start_time=start, end_time=end, duration=duration)

        entry = await self.repository.create(db, actor, data, today=app_today())
        logger.info(
            "Time entry created",
            id=str(entry.id),
            user_id=str(entry.user_id),
            duration=entry.duration,
            actor_id=str(actor.user_id),
        )
        return await self._detailed(db, actor, entry)

    async def update_entry(
        self, db: AsyncSession, actor: ActorContext, entry_id: UUID, entry_in: TimeEntryUpdate
    ) -> TimeEntryResponse:
        update_data = entry_in.model_dump(exclude_unset=True)
        on = app_today()

        if {"start_time", "end_time", "duration"} & update_data.keys():
            current = await self.repository.get_or_404(db, actor, entry_id, today=on)
            start_time = update_data.pop("start_time", None) or current.start_time
            end_time = update_data.pop("end_time", None)
            duration = update_data.pop("duration", None)
            if end_time is None and duration is None:
                end_time = current.end_time
            start, end, hours = resolve_times(start_time, end_time, duration)
            update_data.update(start_time=start, end_time=end, duration=hours)

        entry = await self.repository.update(db, actor, entry_id, update_data, today=on)
        return await self._detailed(db, actor, entry)

    async def delete_entry(self, db: AsyncSession, actor: ActorContext, entry_id: UUID) -> None:
        await self.repository.delete(db, actor, entry_id, today=app_today())


time_entry_service = TimeEntryService()
