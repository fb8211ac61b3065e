"""
Organization and Department Repositories
"""

from datetime import date
from typing import List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
import structlog

from timetracker.core import scoping
from timetracker.core.context import ActorContext
from timetracker.core.exceptions import RecordNotFound
from timetracker.models.employee import Employee
from timetracker.models.organization import Department, Organization
from timetracker.repositories.base import ScopedRepository, as_uuid, ensure_actor

logger = structlog.get_logger()


class OrganizationRepository(ScopedRepository[Organization]):
    entity_name = "Organization"

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.organization_visibility_clause(actor)

    async def create(self, db: AsyncSession, actor: ActorContext, obj_in_data: dict) -> Organization:
        ensure_actor(actor)
        if not scoping.can_manage_organizations(actor):
            raise self.deny(actor, "organization.create")
        return await self._insert(db, obj_in_data, created_by_id=actor.user_id)

    async def update(
        self, db: AsyncSession, actor: ActorContext, organization_id: Union[UUID, str], obj_in_data: dict
    ) -> Organization:
        organization = await self.get_or_404(db, actor, organization_id)
        if not scoping.can_manage_organizations(actor):
            raise self.deny(actor, "organization.update", organization)
        return await self._apply_update(db, organization, obj_in_data)

    async def delete(self, db: AsyncSession, actor: ActorContext, organization_id: Union[UUID, str]) -> Organization:
        """Delete an organization and its departments"""
        organization = await self.get_or_404(db, actor, organization_id)
        if not scoping.can_manage_organizations(actor):
            raise self.deny(actor, "organization.delete", organization)

        await db.execute(delete(Department).where(Department.organization_id == organization.id))
        await self._remove(db, organization)
        return organization


class DepartmentRepository(ScopedRepository[Department]):
    entity_name = "Department"

    def visibility_clause(self, actor: ActorContext, *, today: date):
        return scoping.department_visibility_clause(actor)

    async def list_for_organization(
        self, db: AsyncSession, actor: ActorContext, organization_id: Optional[Union[UUID, str]] = None
    ) -> List[Department]:
        ensure_actor(actor)
        query = self.scoped_query(actor, today=self._today(None))
        if organization_id is not None:
            query = query.where(Department.organization_id == as_uuid(organization_id))
        result = await db.execute(query.order_by(Department.name))
        return list(result.scalars().all())

    async def _check_organization(self, db: AsyncSession, actor: ActorContext, organization_id) -> None:
        if await organization_repository.get(db, actor, organization_id) is None:
            raise RecordNotFound("Organization", organization_id)

    async def create(self, db: AsyncSession, actor: ActorContext, obj_in_data: dict) -> Department:
        ensure_actor(actor)
        if not scoping.can_manage_departments(actor):
            raise self.deny(actor, "department.create")
        await self._check_organization(db, actor, obj_in_data.get("organization_id"))
        return await self._insert(db, obj_in_data, created_by_id=actor.user_id)

    async def update(
        self, db: AsyncSession, actor: ActorContext, department_id: Union[UUID, str], obj_in_data: dict
    ) -> Department:
        department = await self.get_or_404(db, actor, department_id)
        if not scoping.can_manage_departments(actor):
            raise self.deny(actor, "department.update", department)
        if obj_in_data.get("organization_id") is not None:
            await self._check_organization(db, actor, obj_in_data["organization_id"])
        return await self._apply_update(db, department, obj_in_data)

    async def delete(self, db: AsyncSession, actor: ActorContext, department_id: Union[UUID, str]) -> Department:
        department = await self.get_or_404(db, actor, department_id)
        if not scoping.can_manage_departments(actor):
            raise self.deny(actor, "department.delete", department)
        await self._remove(db, department)
        return department

    async def set_manager(
        self,
        db: AsyncSession,
        actor: ActorContext,
        department_id: Union[UUID, str],
        employee_id: Optional[Union[UUID, str]],
    ) -> Department:
        department = await self.get_or_404(db, actor, department_id)
        if not scoping.can_manage_departments(actor):
            raise self.deny(actor, "department.set_manager", department)

        if employee_id is None:
            department.manager_id = None
        else:
            employee_uuid = as_uuid(employee_id)
            exists = await db.execute(select(Employee.id).where(Employee.id == employee_uuid)) if employee_uuid else None
            if exists is None or exists.first() is None:
                raise RecordNotFound("Employee", employee_id)
            department.manager_id = employee_uuid
        return await self._save(db, department)


organization_repository = OrganizationRepository(Organization)
department_repository = DepartmentRepository(Department)
