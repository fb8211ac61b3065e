"""
Employee Repository
"""

from datetime import date
from typing import List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, delete, update
import structlog

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import Conflict, RecordNotFound
from timetracker.models.employee import Employee
from timetracker.models.organization import Department
from timetracker.models.project import ProjectEmployee
from timetracker.models.user import User
from timetracker.repositories.base import ScopedRepository, as_uuid, ensure_actor

logger = structlog.get_logger()


class EmployeeRepository(ScopedRepository[Employee]):
    """Repository for employee database operations"""

    entity_name = "Employee"

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.employee_visibility_clause(actor)

    async def search(
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
        ensure_actor(actor)
        query = self.scoped_query(actor, today=self._today(None))
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Employee.first_name.ilike(pattern),
                    Employee.last_name.ilike(pattern),
                    Employee.email.ilike(pattern),
                    Employee.employee_number.ilike(pattern),
                )
            )
        if department:
            query = query.where(Employee.department == department)
        if is_active is not None:
            query = query.where(Employee.is_active == is_active)
        query = query.order_by(Employee.last_name, Employee.first_name).offset(skip).limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_for_user(self, db: AsyncSession, actor: ActorContext, user_id: UUID) -> Optional[Employee]:
        ensure_actor(actor)
        query = self.scoped_query(actor, today=self._today(None)).where(Employee.user_id == user_id)
        return (await db.execute(query)).scalar_one_or_none()

    async def _ensure_unique_number(self, db: AsyncSession, number: str, exclude_id: Optional[UUID] = None) -> None:
        query = select(Employee.id).where(Employee.employee_number == number)
        if exclude_id:
            query = query.where(Employee.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise Conflict(f"Employee number '{number}' already exists")

    async def create(self, db: AsyncSession, actor: ActorContext, obj_in_data: dict) -> Employee:
        ensure_actor(actor)
        if not scoping.can_manage_department_members(actor, obj_in_data.get("department")):
            raise self.deny(actor, "employee.create", obj_in_data.get("department"))

        await self._ensure_unique_number(db, obj_in_data["employee_number"])
        return await self._insert(db, obj_in_data)

    async def update(
        self,
        db: AsyncSession,
        actor: ActorContext,
        employee_id: Union[UUID, str],
        obj_in_data: dict,
    ) -> Employee:
        employee = await self.get_or_404(db, actor, employee_id)
        if not scoping.can_mutate_employee(actor, employee):
            raise self.deny(actor, "employee.update", employee)

        new_department = obj_in_data.get("department")
        if new_department is not None and not scoping.can_manage_department_members(actor, new_department):
            raise self.deny(actor, "employee.move_department", employee)

        if obj_in_data.get("employee_number"):
            await self._ensure_unique_number(db, obj_in_data["employee_number"], exclude_id=employee.id)

        data = {k: v for k, v in obj_in_data.items() if k != "user_id"}
        return await self._apply_update(db, employee, data)

    async def delete(self, db: AsyncSession, actor: ActorContext, employee_id: Union[UUID, str]) -> Employee:
        employee = await self.get_or_404(db, actor, employee_id)
        if not scoping.can_mutate_employee(actor, employee):
            raise self.deny(actor, "employee.delete", employee)

        await db.execute(delete(ProjectEmployee).where(ProjectEmployee.employee_id == employee.id))
        await db.execute(update(Department).where(Department.manager_id == employee.id).values(manager_id=None))
        await self._remove(db, employee)
        return employee

    async def link_user(
        self,
        db: AsyncSession,
        actor: ActorContext,
        employee_id: Union[UUID, str],
        user_id: Optional[Union[UUID, str]],
    ) -> Employee:
        """Link (or with None, unlink) a user account; admin only"""
        employee = await self.get_or_404(db, actor, employee_id)
        if not scoping.can_change_roles(actor):
            raise self.deny(actor, "employee.link_user", employee)

        if user_id is None:
            employee.user_id = None
            return await self._save(db, employee)

        user_uuid = as_uuid(user_id)
        user = await db.get(User, user_uuid) if user_uuid else None
        if user is None:
            raise RecordNotFound("User", user_id)

        linked = await db.execute(
            select(Employee.id).where(Employee.user_id == user.id, Employee.id != employee.id)
        )
        if linked.first() is not None:
            raise Conflict("User is already linked to another employee")

        employee.user_id = user.id
        return await self._save(db, employee)


employee_repository = EmployeeRepository(Employee)
