"""
Organization and Department Schemas
"""

from typing import Optional
from uuid import UUID
from pydantic import Field, field_validator

from timetracker.schemas.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
    validate_non_empty_string,
)


class OrganizationCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_non_empty_string(v)


class OrganizationUpdate(BaseUpdateSchema):
    required_if_sent = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class OrganizationResponse(BaseResponseSchema):
    name: str
    description: Optional[str] = None
    created_by_id: Optional[UUID] = None


class DepartmentCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    organization_id: UUID
    manager_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_non_empty_string(v)


class DepartmentUpdate(BaseUpdateSchema):
    required_if_sent = ("name", "organization_id")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    organization_id: Optional[UUID] = None


class DepartmentManagerRequest(BaseSchema):
    employee_id: Optional[UUID] = Field(None, description="Employee to lead the department; null clears it")


class DepartmentResponse(BaseResponseSchema):
    name: str
    description: Optional[str] = None
    organization_id: UUID
    manager_id: Optional[UUID] = None
    created_by_id: Optional[UUID] = None
