"""
Base Pydantic Schemas
Shared configuration and field validators for request/response models
"""

import re
from datetime import datetime
from typing import Optional, Any, ClassVar, Dict, Tuple
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, model_validator

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
# HH:MM, optionally with seconds, which are dropped
CLOCK_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$')
COLOR_PATTERN = re.compile(r'^#[0-9A-Fa-f]{6}$')


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        str_strip_whitespace=True,
        use_enum_values=True
    )


class BaseCreateSchema(BaseSchema):
    pass


class BaseUpdateSchema(BaseSchema):
    """Partial update; services apply only the fields that were sent.

    Fields listed in `required_if_sent` back NOT NULL columns: they may be
    omitted, but an explicit null is rejected.
    """
    required_if_sent: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulled = sorted(
            name for name in self.required_if_sent
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


class BaseResponseSchema(BaseSchema):
    id: UUID = Field(..., description="Unique identifier")
    created_at: datetime
    updated_at: datetime


class SuccessResponse(BaseModel):
    message: str = Field(..., description="Success message")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional data")


def validate_non_empty_string(v: Any) -> str:
    if not isinstance(v, str):
        raise ValueError("Must be a string")
    if not v.strip():
        raise ValueError("String cannot be empty")
    return v.strip()


def validate_email(v: Any) -> str:
    """Validate email format and normalise to lower case"""
    if not isinstance(v, str):
        raise ValueError("Email must be a string")
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v.lower()


def validate_clock(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not CLOCK_PATTERN.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v[:5]


def validate_color(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not COLOR_PATTERN.match(v):
        raise ValueError("Color must be a hex value like #1976D2")
    return v.upper()
