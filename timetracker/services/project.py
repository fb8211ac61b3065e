"""
Project Service
Business logic for projects and their employee assignments
"""

from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.exceptions import ValidationFailed
from timetracker.core.guard import project_controls
from timetracker.core.timekeeping import today as app_today
from timetracker.models.employee import Employee
from timetracker.models.project import Project, ProjectEmployee
from timetracker.repositories.project import project_repository
from timetracker.repositories.task import task_repository
from timetracker.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from timetracker.schemas.task import TaskResponse
from timetracker.services.task import to_task_response

logger = structlog.get_logger()


def to_project_response(project: Project, on: date) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        created_at=project.created_at,
        updated_at=project.updated_at,
        name=project.name,
        project_number=project.project_number,
        description=project.description,
        color=project.color,
        start_date=project.start_date,
        end_date=project.end_date,
        is_enterprise_wide=project.is_enterprise_wide,
        user_id=project.user_id,
        status=project.status_on(on).value,
    )


class ProjectService:
    """Service for project management"""

    def __init__(self):
        self.repository = project_repository

    async def list_projects(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> ProjectListResponse:
        on = app_today()
        projects, total = await self.repository.filter_projects(
            db,
            actor,
            {"search": search, "status": status},
            today=on,
            skip=skip,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return ProjectListResponse(
            items=[to_project_response(p, on) for p in projects],
            total=total,
            skip=skip,
            limit=limit,
            controls=project_controls(actor),
        )

    async def get_project(self, db: AsyncSession, actor: ActorContext, project_id: UUID) -> ProjectResponse:
        on = app_today()
        project = await self.repository.get_or_404(db, actor, project_id, today=on)
        return to_project_response(project, on)

    async def create_project(self, db: AsyncSession, actor: ActorContext, project_in: ProjectCreate) -> ProjectResponse:
        await self.repository.ensure_unique_number(db, project_in.project_number)
        project = await self.repository.create(db, actor, project_in.model_dump())
        logger.info("Project created", id=str(project.id), name=project.name, actor_id=str(actor.user_id))
        return to_project_response(project, app_today())

    async def update_project(
        self,
        db: AsyncSession,
        actor: ActorContext,
        project_id: UUID,
        project_in: ProjectUpdate,
    ) -> ProjectResponse:
        on = app_today()
        update_data = project_in.model_dump(exclude_unset=True)

        current = await self.repository.get_or_404(db, actor, project_id, today=on)
        start = update_data.get("start_date", current.start_date)
        end = update_data.get("end_date", current.end_date)
        if start and end and end < start:
            raise ValidationFailed("end_date must not be before start_date")
        if update_data.get("project_number"):
            await self.repository.ensure_unique_number(db, update_data["project_number"], exclude_id=current.id)

        project = await self.repository.update(db, actor, project_id, update_data, today=on)
        return to_project_response(project, on)

    async def delete_project(self, db: AsyncSession, actor: ActorContext, project_id: UUID) -> None:
        project = await self.repository.delete(db, actor, project_id, today=app_today())
        logger.info("Project deleted", id=str(project.id), actor_id=str(actor.user_id))

    async def list_project_employees(self, db: AsyncSession, actor: ActorContext, project_id: UUID) -> List[Employee]:
        return await self.repository.list_employees(db, actor, project_id, today=app_today())

    async def assign_employee(
        self, db: AsyncSession, actor: ActorContext, project_id: UUID, employee_id: UUID
    ) -> ProjectEmployee:
        return await self.repository.assign_employee(db, actor, project_id, employee_id, today=app_today())

    async def unassign_employee(
        self, db: AsyncSession, actor: ActorContext, project_id: UUID, employee_id: UUID
    ) -> None:
        await self.repository.unassign_employee(db, actor, project_id, employee_id, today=app_today())

    async def list_project_tasks(
        self, db: AsyncSession, actor: ActorContext, project_id: UUID
    ) -> List[TaskResponse]:
        on = app_today()
        project = await self.repository.get_or_404(db, actor, project_id, today=on)
        rows = await task_repository.list_with_projects(db, actor, today=on, project_id=project.id)
        return [to_task_response(task, project) for task, project in rows]


project_service = ProjectService()
