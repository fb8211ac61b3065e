"""
Organization Endpoints
"""

from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from timetracker.core.context import ActorContext
from timetracker.core.database import get_db
from timetracker.core.deps import require_access
from timetracker.core.rbac import Capability
from timetracker.schemas.base import SuccessResponse
from timetracker.schemas.organization import (
    DepartmentResponse,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from timetracker.services.organization import organization_service

router = APIRouter()

MANAGE_SYSTEM = [Capability.MANAGE_SYSTEM]


@router.get("", response_model=List[OrganizationResponse])
@router.get("/", response_model=List[OrganizationResponse])
async def list_organizations(
    actor: ActorContext = Depends(require_access("organizations.list")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Admins see every organization, everyone else only their own."""
    return await organization_service.list_organizations(db, actor)


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    organization_in: OrganizationCreate,
    actor: ActorContext = Depends(require_access("organizations.create", required_permissions=MANAGE_SYSTEM)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.create_organization(db, actor, organization_in)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: UUID,
    actor: ActorContext = Depends(require_access("organizations.read")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.get_organization(db, actor, organization_id)


@router.put("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: UUID,
    organization_in: OrganizationUpdate,
    actor: ActorContext = Depends(require_access("organizations.update", required_permissions=MANAGE_SYSTEM)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.update_organization(db, actor, organization_id, organization_in)


@router.delete("/{organization_id}", response_model=SuccessResponse)
async def delete_organization(
    organization_id: UUID,
    actor: ActorContext = Depends(require_access("organizations.delete", required_permissions=MANAGE_SYSTEM)),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Delete an organization together with its departments."""
    await organization_service.delete_organization(db, actor, organization_id)
    return SuccessResponse(message="Organization deleted successfully")


@router.get("/{organization_id}/departments", response_model=List[DepartmentResponse])
async def list_organization_departments(
    organization_id: UUID,
    actor: ActorContext = Depends(require_access("organizations.departments")),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await organization_service.list_organization_departments(db, actor, organization_id)
