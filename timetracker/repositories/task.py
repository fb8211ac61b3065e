"""
Task Repository
Tasks are visible exactly when their parent project is visible
"""

from datetime import date
from typing import List, Optional, Tuple, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, update
import structlog

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import RecordNotFound
from timetracker.models.project import Project
from timetracker.models.task import Task, TaskStatus
from timetracker.models.time_entry import TimeEntry
from timetracker.repositories.base import ScopedRepository, as_uuid, ensure_actor
from timetracker.repositories.project import project_repository

logger = structlog.get_logger()


class TaskRepository(ScopedRepository[Task]):
    """Repository for task database operations"""

    entity_name = "Task"

    def base_query(self) -> Select:
        return select(Task).join(Project, Task.project_id == Project.id)

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.task_visibility_clause(actor, today=today)

    async def list_with_projects(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        today: date,
        project_id: Optional[Union[UUID, str]] = None,
        status: Optional[str] = None,
    ) -> List[Tuple[Task, Project]]:
        """Visible tasks paired with their project, ordered by project then task name"""
        ensure_actor(actor)
        query = select(Task, Project).join(Project, Task.project_id == Project.id)
        clause = self.visibility_clause(actor, today=today)
        if clause is not None:
            query = query.where(clause)
        if project_id is not None:
            query = query.where(Task.project_id == as_uuid(project_id))
        if status:
            query = query.where(Task.status == status)
        query = query.order_by(Project.name, Task.name)

        result = await db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def list_selectable(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        today: date,
        project_id: Optional[Union[UUID, str]] = None,
    ) -> List[Tuple[Task, Project]]:
        """Tasks that can receive new time entries: not archived, project active today"""
        rows = await self.list_with_projects(db, actor, today=today, project_id=project_id)
        return [(task, project) for task, project in rows if scoping.is_task_selectable(task, project, today=today)]

    async def create(
        self,
        db: AsyncSession,
        actor: ActorContext,
        obj_in_data: dict,
        *,
        today: date,
    ) -> Task:
        ensure_actor(actor)
        project = await project_repository.get(db, actor, obj_in_data.get("project_id"), today=today)
        if project is None:
            raise RecordNotFound("Project", obj_in_data.get("project_id"))
        if not scoping.can_create_task(actor, project):
            raise self.deny(actor, "task.create", project)

        data = {**obj_in_data, "project_id": project.id}
        data.setdefault("status", TaskStatus.ACTIVE.value)
        return await self._insert(db, data)

    async def update(
        self,
        db: AsyncSession,
        actor: ActorContext,
        task_id: Union[UUID, str],
        obj_in_data: dict,
        *,
        today: date,
    ) -> Task:
        task = await self.get_or_404(db, actor, task_id, today=today)
        if not scoping.can_edit_task(actor, task):
            raise self.deny(actor, "task.update", task)

        data = dict(obj_in_data)
        if "project_id" in data and data["project_id"] != task.project_id:
            target = await project_repository.get(db, actor, data["project_id"], today=today)
            if target is None:
                raise RecordNotFound("Project", data["project_id"])
        return await self._apply_update(db, task, data)

    async def delete(
        self,
        db: AsyncSession,
        actor: ActorContext,
        task_id: Union[UUID, str],
        *,
        today: date,
    ) -> Task:
        """Delete a task; time entries keep their hours but lose the task reference"""
        task = await self.get_or_404(db, actor, task_id, today=today)
        if not scoping.can_delete_task(actor, task):
            raise self.deny(actor, "task.delete", task)

        await db.execute(update(TimeEntry).where(TimeEntry.task_id == task.id).values(task_id=None))
        await self._remove(db, task)
        return task

    async def clone(
        self,
        db: AsyncSession,
        actor: ActorContext,
        task_id: Union[UUID, str],
        *,
        today: date,
        target_project_id: Optional[Union[UUID, str]] = None,
        name: Optional[str] = None,
    ) -> Task:
        source = await self.get_or_404(db, actor, task_id, today=today)
        if not scoping.can_clone_task(actor, source):
            raise self.deny(actor, "task.clone", source)

        project_id = source.project_id
        if target_project_id is not None:
            target = await project_repository.get(db, actor, target_project_id, today=today)
            if target is None:
                raise RecordNotFound("Project", target_project_id)
            project_id = target.id

        return await self._insert(
            db,
            {
                "project_id": project_id,
                "name": name or f"{source.name} (Copy)",
                "description": source.description,
                "status": TaskStatus.ACTIVE.value,
            },
        )


task_repository = TaskRepository(Task)
