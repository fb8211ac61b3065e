"""
Time Entry Schemas
"""

import datetime as dt
from typing import Optional
from uuid import UUID
from pydantic import Field, field_validator, model_validator

from timetracker.schemas.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseUpdateSchema,
    validate_clock,
)


class TimeEntryCreate(BaseCreateSchema):
    """
    Either start/end times or a manual duration.

    With only a duration, the entry starts at 09:00 and the end time is derived.
    """
    project_id: UUID
    task_id: Optional[UUID] = None
    description: Optional[str] = None
    date: dt.date
    start_time: Optional[str] = Field(None, description="HH:MM")
    end_time: Optional[str] = Field(None, description="HH:MM")
    duration: Optional[float] = Field(None, gt=0, le=24, description="Hours, used when times are omitted")
    user_id: Optional[UUID] = Field(None, description="Owner of the entry; only admins may set another user")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return validate_clock(v)

    @model_validator(mode="after")
    def validate_mode(self):
        if self.end_time is None and self.duration is None:
            raise ValueError("Provide end_time or duration")
        if self.end_time is not None and self.start_time is None:
            raise ValueError("start_time is required with end_time")
        return self


class TimeEntryUpdate(BaseUpdateSchema):
    # start_time, end_time and duration stay nullable: the service falls back to stored values
    required_if_sent = ("project_id", "date")

    project_id: Optional[UUID] = None
    task_id: Optional[UUID] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration: Optional[float] = Field(None, gt=0, le=24)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return validate_clock(v)


class TimeEntryResponse(BaseResponseSchema):
    user_id: UUID
    project_id: UUID
    task_id: Optional[UUID] = None
    description: Optional[str] = None
    date: dt.date
    start_time: str
    end_time: str
    duration: float
    project_name: Optional[str] = None
    project_color: Optional[str] = None
    task_name: Optional[str] = None
    user_email: Optional[str] = None
