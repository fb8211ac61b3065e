"""
Task Schemas
"""

from enum import Enum
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


class TaskStatusEnum(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TaskCreate(BaseCreateSchema):
    project_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatusEnum = TaskStatusEnum.ACTIVE

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_non_empty_string(v)


class TaskUpdate(BaseUpdateSchema):
    required_if_sent = ("project_id", "name", "status")

    project_id: Optional[UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatusEnum] = None


class TaskCloneRequest(BaseSchema):
    project_id: Optional[UUID] = Field(None, description="Target project, defaults to the source task's project")
    name: Optional[str] = Field(None, max_length=255)


class TaskResponse(BaseResponseSchema):
    project_id: UUID
    name: str
    description: Optional[str] = None
    status: str
    project_name: Optional[str] = None
    project_color: Optional[str] = None
