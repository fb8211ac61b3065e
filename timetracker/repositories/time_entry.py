"""
Time Entry Repository
Scoped CRUD plus the aggregates behind the dashboard and reports
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, func
import structlog

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import RecordNotFound, ValidationFailed
from timetracker.core.rbac import Capability
from timetracker.models.employee import Employee
from timetracker.models.organization import Department
from timetracker.models.project import Project
from timetracker.models.task import Task
from timetracker.models.time_entry import TimeEntry
from timetracker.models.user import User
from timetracker.repositories.base import ScopedRepository, as_uuid, ensure_actor
from timetracker.repositories.project import project_repository

logger = structlog.get_logger()


class TimeEntryRepository(ScopedRepository[TimeEntry]):
    """Repository for time entry database operations"""

    entity_name = "Time entry"

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.time_entry_visibility_clause(actor)

    def _scoped(
        self,
        query: Select,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Select:
        clause = scoping.time_entry_visibility_clause(actor)
        if clause is not None:
            query = query.where(clause)
        if start_date is not None:
            query = query.where(TimeEntry.date >= start_date)
        if end_date is not None:
            query = query.where(TimeEntry.date <= end_date)
        return query

    async def list_detailed(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        project_id: Optional[Union[UUID, str]] = None,
        user_id: Optional[Union[UUID, str]] = None,
        skip: int = 0,
        limit: int = 500,
    ) -> List[Tuple[TimeEntry, Project, Optional[Task], User]]:
        """Visible entries with their project, task and user, newest first"""
        ensure_actor(actor)
        query = (
            select(TimeEntry, Project, Task, User)
            .join(Project, TimeEntry.project_id == Project.id)
            .outerjoin(Task, TimeEntry.task_id == Task.id)
            .join(User, TimeEntry.user_id == User.id)
        )
        query = self._scoped(query, actor, start_date, end_date)
        if project_id is not None:
            query = query.where(TimeEntry.project_id == as_uuid(project_id))
        if user_id is not None:
            query = query.where(TimeEntry.user_id == as_uuid(user_id))
        query = query.order_by(TimeEntry.date.desc(), TimeEntry.start_time.desc()).offset(skip).limit(limit)

        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    async def _validate_target(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: Any,
        task_id: Any,
        *,
        today: date,
    ) -> Tuple[Project, Optional[Task]]:
        """Project and task a new or moved entry points at, checked for this actor"""
        project = await project_repository.get(db, actor, project_id, today=today)
        if project is None:
            raise RecordNotFound("Project", project_id)

        task = None
        if task_id is not None:
            task_uuid = as_uuid(task_id)
            task = await db.get(Task, task_uuid) if task_uuid else None
            if task is None or task.project_id != project.id:
                raise RecordNotFound("Task", task_id)

        if not actor.can(Capability.MANAGE_SYSTEM):
            if not project.is_active_on(today):
                raise ValidationFailed("Time cannot be logged against a project that is not active")
            if task is not None and task.is_archived:
                raise ValidationFailed("Time cannot be logged against an archived task")
        return project, task

    async def create(
        self,
        db: AsyncSession,
        actor: ActorContext,
        obj_in_data: dict,
        *,
        today: date,
    ) -> TimeEntry:
        ensure_actor(actor)
        data = dict(obj_in_data)
        owner_id = as_uuid(data.get("user_id") or actor.user_id)
        if owner_id is None:
            raise RecordNotFound("User", data.get("user_id"))
        if not scoping.can_log_time_for(actor, owner_id):
            raise self.deny(actor, "time_entry.create_for_other_user", owner_id)
        if owner_id != actor.user_id and await db.get(User, owner_id) is None:
            raise RecordNotFound("User", owner_id)

        await self._validate_target(db, actor, data.get("project_id"), data.get("task_id"), today=today)
        data["user_id"] = owner_id
        return await self._insert(db, data)

    async def _get_mutable(
        self,
        db: AsyncSession,
        actor: ActorContext,
        entry_id: Union[UUID, str],
        operation: str,
        *,
        today: date,
    ) -> TimeEntry:
        entry = await self.get_or_404(db, actor, entry_id, today=today)
        project = await db.get(Project, entry.project_id)
        task = await db.get(Task, entry.task_id) if entry.task_id else None
        if not scoping.can_mutate_time_entry(actor, entry, project, task, today=today):
            raise self.deny(actor, operation, entry)
        return entry

    async def update(
        self,
        db: AsyncSession,
        actor: ActorContext,
        entry_id: Union[UUID, str],
        obj_in_data: dict,
        *,
        today: date,
    ) -> TimeEntry:
        entry = await self._get_mutable(db, actor, entry_id, "time_entry.update", today=today)
        data = dict(obj_in_data)
        data.pop("user_id", None)

        if "project_id" in data or "task_id" in data:
            project_id = data.get("project_id", entry.project_id)
            task_id = data["task_id"] if "task_id" in data else entry.task_id
            await self._validate_target(db, actor, project_id, task_id, today=today)

        return await self._apply_update(db, entry, data)

    async def delete(
        self,
        db: AsyncSession,
        actor: ActorContext,
        entry_id: Union[UUID, str],
        *,
        today: date,
    ) -> TimeEntry:
        entry = await self._get_mutable(db, actor, entry_id, "time_entry.delete", today=today)
        await self._remove(db, entry)
        return entry

    # Aggregates. Every aggregate uses the same visibility clause as the list above.

    async def total_hours(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> float:
        ensure_actor(actor)
        query = self._scoped(select(func.coalesce(func.sum(TimeEntry.duration), 0.0)), actor, start_date, end_date)
        result = await db.execute(query)
        return round(float(result.scalar() or 0.0), 2)

    async def totals(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        ensure_actor(actor)
        query = self._scoped(
            select(
                func.coalesce(func.sum(TimeEntry.duration), 0.0),
                func.count(TimeEntry.id),
                func.count(func.distinct(TimeEntry.project_id)),
            ),
            actor,
            start_date,
            end_date,
        )
        hours, entries, projects = (await db.execute(query)).one()
        return {
            "total_hours": round(float(hours or 0.0), 2),
            "total_entries": int(entries or 0),
            "total_projects": int(projects or 0),
        }

    async def project_breakdown(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        ensure_actor(actor)
        query = (
            select(
                Project.id,
                Project.name,
                Project.color,
                func.sum(TimeEntry.duration),
                func.count(TimeEntry.id),
            )
            .join(Project, TimeEntry.project_id == Project.id)
            .group_by(Project.id, Project.name, Project.color)
        )
        query = self._scoped(query, actor, start_date, end_date)
        rows = (await db.execute(query)).all()

        breakdown = [
            {
                "project_id": project_id,
                "name": name,
                "color": color,
                "hours": round(float(hours or 0.0), 2),
                "entries": int(entries or 0),
            }
            for project_id, name, color, hours, entries in rows
        ]
        breakdown.sort(key=lambda item: item["hours"], reverse=True)
        return breakdown

    async def recent_activity(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        limit: int = 10,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Tuple[TimeEntry, Project, Optional[Task], User]]:
        return await self.list_detailed(
            db, actor, start_date=start_date, end_date=end_date, limit=limit
        )

    async def department_hours(
        self,
        db: AsyncSession,
        actor: ActorContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """Visible hours grouped by the logging user's department ("Unassigned" when none)"""
        ensure_actor(actor)
        query = (
            select(TimeEntry.user_id, func.sum(TimeEntry.duration))
            .group_by(TimeEntry.user_id)
        )
        query = self._scoped(query, actor, start_date, end_date)
        per_user = {user_id: float(hours or 0.0) for user_id, hours in (await db.execute(query)).all()}
        if not per_user:
            return []

        employees = (
            await db.execute(select(Employee.user_id, Employee.department).where(Employee.user_id.in_(list(per_user))))
        ).all()
        user_department = {user_id: department for user_id, department in employees}

        user_department = {user_id: as_uuid(department) for user_id, department in user_department.items() if department}
        department_ids = {d for d in user_department.values() if d is not None}
        names: Dict[str, str] = {}
        if department_ids:
            rows = (await db.execute(select(Department.id, Department.name).where(Department.id.in_(department_ids)))).all()
            names = {str(dept_id): name for dept_id, name in rows}

        totals: Dict[str, float] = {}
        for user_id, hours in per_user.items():
            department_id = user_department.get(user_id)
            label = names.get(str(department_id), "Unassigned") if department_id else "Unassigned"
            totals[label] = totals.get(label, 0.0) + hours

        return sorted(
            ({"department": name, "hours": round(hours, 2)} for name, hours in totals.items()),
            key=lambda item: item["hours"],
            reverse=True,
        )


time_entry_repository = TimeEntryRepository(TimeEntry)
