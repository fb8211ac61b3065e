"""
Organization Service
Organizations, departments and department managers
"""

from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from timetracker.core.context import ActorContext
from timetracker.models.organization import Department, Organization
from timetracker.repositories.organization import department_repository, organization_repository
from timetracker.schemas.organization import (
    DepartmentCreate,
    DepartmentUpdate,
    OrganizationCreate,
    OrganizationUpdate,
)

logger = structlog.get_logger()


class OrganizationService:
    def __init__(self):
        self.organizations = organization_repository
        self.departments = department_repository

    async def list_organizations(self, db: AsyncSession, actor: ActorContext) -> List[Organization]:
        return await self.organizations.get_multi(db, actor, order_by="name", limit=1000)

    async def get_organization(self, db: AsyncSession, actor: ActorContext, organization_id: UUID) -> Organization:
        return await self.organizations.get_or_404(db, actor, organization_id)

    async def create_organization(
        self, db: AsyncSession, actor: ActorContext, organization_in: OrganizationCreate
    ) -> Organization:
        organization = await self.organizations.create(db, actor, organization_in.model_dump())
        logger.info("Organization created", id=str(organization.id), name=organization.name)
        return organization

    async def update_organization(
        self, db: AsyncSession, actor: ActorContext, organization_id: UUID, organization_in: OrganizationUpdate
    ) -> Organization:
        return await self.organizations.update(
            db, actor, organization_id, organization_in.model_dump(exclude_unset=True)
        )

    async def delete_organization(self, db: AsyncSession, actor: ActorContext, organization_id: UUID) -> None:
        await self.organizations.delete(db, actor, organization_id)

    async def list_organization_departments(
        self, db: AsyncSession, actor: ActorContext, organization_id: UUID
    ) -> List[Department]:
        organization = await self.organizations.get_or_404(db, actor, organization_id)
        return await self.departments.list_for_organization(db, actor, organization.id)

    async def list_departments(self, db: AsyncSession, actor: ActorContext) -> List[Department]:
        return await self.departments.list_for_organization(db, actor)

    async def get_department(self, db: AsyncSession, actor: ActorContext, department_id: UUID) -> Department:
        return await self.departments.get_or_404(db, actor, department_id)

    async def create_department(
        self, db: AsyncSession, actor: ActorContext, department_in: DepartmentCreate
    ) -> Department:
        data = department_in.model_dump()
        manager_id = data.pop("manager_id", None)
        department = await self.departments.create(db, actor, data)
        if manager_id is not None:
            department = await self.departments.set_manager(db, actor, department.id, manager_id)
        logger.info("Department created", id=str(department.id), name=department.name)
        return department

    async def update_department(
        self, db: AsyncSession, actor: ActorContext, department_id: UUID, department_in: DepartmentUpdate
    ) -> Department:
        return await self.departments.update(db, actor, department_id, department_in.model_dump(exclude_unset=True))

    async def delete_department(self, db: AsyncSession, actor: ActorContext, department_id: UUID) -> None:
        await self.departments.delete(db, actor, department_id)

    async def set_department_manager(
        self, db: AsyncSession, actor: ActorContext, department_id: UUID, employee_id
    ) -> Department:
        return await self.departments.set_manager(db, actor, department_id, employee_id)


organization_service = OrganizationService()
