"""
Project Schemas
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import Field, field_validator, model_validator

from timetracker.schemas.auth import ProjectControls
from timetracker.schemas.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
    validate_color,
    validate_non_empty_string,
)


class ProjectBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    project_number: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    color: str = Field("#1976D2", description="Hex display color")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_enterprise_wide: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_non_empty_string(v)

    @field_validator("color")
    @classmethod
    def validate_color_format(cls, v):
        return validate_color(v)

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectCreate(ProjectBase, BaseCreateSchema):
    pass


class ProjectUpdate(BaseUpdateSchema):
    required_if_sent = ("name", "color", "is_enterprise_wide")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    project_number: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    color: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_enterprise_wide: Optional[bool] = None

    @field_validator("color")
    @classmethod
    def validate_color_format(cls, v):
        return validate_color(v)


class ProjectResponse(BaseResponseSchema):
    name: str
    project_number: Optional[str] = None
    description: Optional[str] = None
    color: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_enterprise_wide: bool
    user_id: Optional[UUID] = None
    status: str = Field(..., description="upcoming, active or ended, derived from the date window")


class ProjectListResponse(BaseSchema):
    items: List[ProjectResponse]
    total: int
    skip: int
    limit: int
    controls: ProjectControls


class ProjectEmployeeAssign(BaseSchema):
    employee_id: UUID


class ProjectEmployeeResponse(BaseSchema):
    id: UUID
    project_id: UUID
    employee_id: UUID
    assigned_by_id: Optional[UUID] = None
    created_at: datetime
