"""
Project Repository
Scoped database operations for projects and their employee assignments
"""

from datetime import date
from typing import List, Optional, Dict, Any, Tuple, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, and_, delete
from sqlalchemy.exc import IntegrityError
import structlog

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import Conflict, RecordNotFound
from timetracker.models.employee import Employee
from timetracker.models.project import Project, ProjectEmployee
from timetracker.models.task import Task
from timetracker.models.time_entry import TimeEntry
from timetracker.repositories.base import ScopedRepository, as_uuid, ensure_actor

logger = structlog.get_logger()

SORTABLE_FIELDS = {"name", "project_number", "start_date", "end_date", "created_at"}


class ProjectRepository(ScopedRepository[Project]):
    """Repository for project database operations"""

    entity_name = "Project"

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.project_visibility_clause(actor, today=today)

    async def filter_projects(
        self,
        db: AsyncSession,
        actor: ActorContext,
        filters: Dict[str, Any],
        *,
        today: date,
        skip: int = 0,
        limit: int = 100,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> Tuple[List[Project], int]:
        """Filter visible projects with pagination and sorting"""
        ensure_actor(actor)
        query = self.scoped_query(actor, today=today)

        if filters.get("search"):
            search = f"%{filters['search']}%"
            query = query.where(
                or_(
                    Project.name.ilike(search),
                    Project.project_number.ilike(search),
                    Project.description.ilike(search),
                )
            )

        status_filter = filters.get("status")
        if status_filter == "active":
            query = query.where(scoping.active_project_clause(today))
        elif status_filter == "upcoming":
            query = query.where(and_(Project.start_date.is_not(None), Project.start_date > today))
        elif status_filter == "ended":
            query = query.where(and_(Project.end_date.is_not(None), Project.end_date < today))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        sort_column = getattr(Project, sort_by if sort_by in SORTABLE_FIELDS else "name")
        query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def count_active(self, db: AsyncSession, actor: ActorContext, *, today: date) -> int:
        """Number of visible projects whose window contains today"""
        ensure_actor(actor)
        query = self.scoped_query(actor, today=today).where(scoping.active_project_clause(today))
        result = await db.execute(select(func.count()).select_from(query.subquery()))
        return result.scalar() or 0

    async def create(
        self,
        db: AsyncSession,
        actor: ActorContext,
        obj_in_data: dict,
    ) -> Project:
        """Create a project owned by the actor"""
        ensure_actor(actor)
        if not scoping.can_create_project(actor):
            raise self.deny(actor, "project.create")

        project = await self._insert(db, obj_in_data, user_id=actor.user_id)
        logger.info("Project created", id=str(project.id), name=project.name)
        return project

    async def update(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: Union[UUID, str],
        obj_in_data: dict,
        *,
        today: date,
    ) -> Project:
        project = await self.get_or_404(db, actor, project_id, today=today)
        if not scoping.can_edit_project(actor, project):
            raise self.deny(actor, "project.update", project)
        return await self._apply_update(db, project, obj_in_data)

    async def delete(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: Union[UUID, str],
        *,
        today: date,
    ) -> Project:
        """Hard delete a project together with its tasks, time entries and assignments"""
        project = await self.get_or_404(db, actor, project_id, today=today)
        if not scoping.can_delete_project(actor, project):
            raise self.deny(actor, "project.delete", project)

        await db.execute(delete(TimeEntry).where(TimeEntry.project_id == project.id))
        await db.execute(delete(Task).where(Task.project_id == project.id))
        await db.execute(delete(ProjectEmployee).where(ProjectEmployee.project_id == project.id))
        await self._remove(db, project)
        return project

    async def list_employees(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: Union[UUID, str],
        *,
        today: date,
    ) -> List[Employee]:
        project = await self.get_or_404(db, actor, project_id, today=today)
        query = (
            select(Employee)
            .join(ProjectEmployee, ProjectEmployee.employee_id == Employee.id)
            .where(ProjectEmployee.project_id == project.id)
            .order_by(Employee.last_name, Employee.first_name)
        )
        clause = scoping.employee_visibility_clause(actor)
        if clause is not None:
            query = query.where(clause)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def assign_employee(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: Union[UUID, str],
        employee_id: Union[UUID, str],
        *,
        today: date,
    ) -> ProjectEmployee:
        project = await self.get_or_404(db, actor, project_id, today=today)
        if not scoping.can_assign_project_employees(actor, project):
            raise self.deny(actor, "project.assign_employee", project)

        employee_uuid = as_uuid(employee_id)
        employee = await db.get(Employee, employee_uuid) if employee_uuid else None
        if employee is None or not scoping.can_view_employee(actor, employee):
            raise RecordNotFound("Employee", employee_id)

        existing = await db.execute(
            select(ProjectEmployee).where(
                ProjectEmployee.project_id == project.id,
                ProjectEmployee.employee_id == employee.id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise Conflict("Employee is already assigned to this project")

        assignment = ProjectEmployee(
            project_id=project.id,
            employee_id=employee.id,
            assigned_by_id=actor.user_id,
        )
        try:
            return await self._save(db, assignment)
        except IntegrityError:
            raise Conflict("Employee is already assigned to this project")

    async def unassign_employee(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: Union[UUID, str],
        employee_id: Union[UUID, str],
        *,
        today: date,
    ) -> None:
        project = await self.get_or_404(db, actor, project_id, today=today)
        if not scoping.can_assign_project_employees(actor, project):
            raise self.deny(actor, "project.unassign_employee", project)

        employee_uuid = as_uuid(employee_id)
        result = await db.execute(
            select(ProjectEmployee).where(
                ProjectEmployee.project_id == project.id,
                ProjectEmployee.employee_id == employee_uuid,
            )
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise RecordNotFound("Assignment", employee_id)
        await self._remove(db, assignment)

    async def ensure_unique_number(
        self,
        db: AsyncSession,
        project_number: Optional[str],
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Project numbers are unique across the whole system, regardless of visibility"""
        if not project_number:
            return
        query = select(Project.id).where(Project.project_number == project_number)
        if exclude_id:
            query = query.where(Project.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise Conflict(f"Project number '{project_number}' already exists")


project_repository = ProjectRepository(Project)
