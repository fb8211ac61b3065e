"""
Task Service
"""

from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.timekeeping import today as app_today
from timetracker.models.project import Project
from timetracker.models.task import Task
from timetracker.repositories.project import project_repository
from timetracker.repositories.task import task_repository
from timetracker.schemas.task import TaskCloneRequest, TaskCreate, TaskResponse, TaskUpdate

logger = structlog.get_logger()


def to_task_response(task: Task, project: Optional[Project] = None) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        created_at=task.created_at,
        updated_at=task.updated_at,
        project_id=task.project_id,
        name=task.name,
        description=task.description,
        status=task.status,
        project_name=project.name if project else None,
        project_color=project.color if project else None,
    )


class TaskService:
    def __init__(self):
        self.repository = task_repository

    async def _with_project(self, db: AsyncSession, actor: ActorContext, task: Task) -> TaskResponse:
        project = await project_repository.get(db, actor, task.project_id, today=app_today())
        return to_task_response(task, project)

    @staticmethod
    def _responses(rows: List[Tuple[Task, Project]]) -> List[TaskResponse]:
        return [to_task_response(task, project) for task, project in rows]

    async def list_all(
        self, db: AsyncSession, actor: ActorContext, *, status: Optional[str] = None
    ) -> List[TaskResponse]:
        rows = await self.repository.list_with_projects(db, actor, today=app_today(), status=status)
        return self._responses(rows)

    async def list_selectable(
        self, db: AsyncSession, actor: ActorContext, *, project_id: Optional[UUID] = None
    ) -> List[TaskResponse]:
        rows = await self.repository.list_selectable(db, actor, today=app_today(), project_id=project_id)
        return self._responses(rows)

    async def get_task(self, db: AsyncSession, actor: ActorContext, task_id: UUID) -> TaskResponse:
        task = await self.repository.get_or_404(db, actor, task_id, today=app_today())
        return await self._with_project(db, actor, task)

    async def create_task(self, db: AsyncSession, actor: ActorContext, task_in: TaskCreate) -> TaskResponse:
        task = await self.repository.create(db, actor, task_in.model_dump(), today=app_today())
        logger.info("Task created", id=str(task.id), project_id=str(task.project_id))
        return await self._with_project(db, actor, task)

    async def update_task(
        self, db: AsyncSession, actor: ActorContext, task_id: UUID, task_in: TaskUpdate
    ) -> TaskResponse:
        task = await self.repository.update(
            db, actor, task_id, task_in.model_dump(exclude_unset=True), today=app_today()
        )
        return await self._with_project(db, actor, task)

    async def delete_task(self, db: AsyncSession, actor: ActorContext, task_id: UUID) -> None:
        await self.repository.delete(db, actor, task_id, today=app_today())

    async def clone_task(
        self, db: AsyncSession, actor: ActorContext, task_id: UUID, clone_in: TaskCloneRequest
    ) -> TaskResponse:
        task = await self.repository.clone(
            db,
            actor,
            task_id,
            today=app_today(),
            target_project_id=clone_in.project_id,
            name=clone_in.name,
        )
        logger.info("Task cloned", source_id=str(task_id), id=str(task.id))
        return await self._with_project(db, actor, task)


task_service = TaskService()
