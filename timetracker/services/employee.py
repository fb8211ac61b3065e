"""
Employee Service
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.models.employee import Employee
from timetracker.repositories.employee import employee_repository
from timetracker.schemas.employee import EmployeeCreate, EmployeeUpdate

logger = structlog.get_logger()


class EmployeeService:
    def __init__(self):
        self.repository = employee_repository

    async def list_employees(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        search: Optional[str] = None,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Employee]:
        return await self.repository.search(
            db, actor, search=search, department=department, is_active=is_active, skip=skip, limit=limit
        )

    async def get_employee(self, db: AsyncSession, actor: ActorContext, employee_id: UUID) -> Employee:
        return await self.repository.get_or_404(db, actor, employee_id)

    async def create_employee(self, db: AsyncSession, actor: ActorContext, employee_in: EmployeeCreate) -> Employee:
        employee = await self.repository.create(db, actor, employee_in.model_dump())
        logger.info(
            "Employee created",
            id=str(employee.id),
            department=employee.department,
            actor_id=str(actor.user_id),
        )
        return employee

    async def update_employee(
        self, db: AsyncSession, actor: ActorContext, employee_id: UUID, employee_in: EmployeeUpdate
    ) -> Employee:
        return await self.repository.update(db, actor, employee_id, employee_in.model_dump(exclude_unset=True))

    async def delete_employee(self, db: AsyncSession, actor: ActorContext, employee_id: UUID) -> None:
        employee = await self.repository.delete(db, actor, employee_id)
        logger.info("Employee deleted", id=str(employee.id), actor_id=str(actor.user_id))


employee_service = EmployeeService()
