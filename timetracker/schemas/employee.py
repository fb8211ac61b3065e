"""
Employee Schemas
"""

from datetime import date
from typing import Optional
from uuid import UUID
from pydantic import Field, field_validator

from timetracker.schemas.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseUpdateSchema,
    validate_email,
    validate_non_empty_string,
)


class EmployeeCreate(BaseCreateSchema):
    employee_number: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: Optional[str] = Field(None, max_length=50)
    department: str = Field(..., min_length=1, max_length=64, description="Department id")
    position: str = Field(..., min_length=1, max_length=100)
    manager_id: Optional[UUID] = None
    hire_date: date
    salary: Optional[float] = Field(None, ge=0)
    is_active: bool = True
    employment_type: str = Field("full-time", max_length=20)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("first_name", "last_name", "employee_number", "position")
    @classmethod
    def validate_required_text(cls, v):
        return validate_non_empty_string(v)


class EmployeeUpdate(BaseUpdateSchema):
    required_if_sent = (
        "employee_number", "first_name", "last_name", "email", "department",
        "position", "hire_date", "is_active", "employment_type",
    )

    employee_number: Optional[str] = Field(None, min_length=1, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, min_length=1, max_length=64)
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    manager_id: Optional[UUID] = None
    hire_date: Optional[date] = None
    salary: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    employment_type: Optional[str] = Field(None, max_length=20)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return None if v is None else validate_email(v)


class EmployeeResponse(BaseResponseSchema):
    employee_number: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    department: str
    position: str
    manager_id: Optional[UUID] = None
    hire_date: date
    salary: Optional[float] = None
    is_active: bool
    employment_type: str
    user_id: Optional[UUID] = None
