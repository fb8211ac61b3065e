"""
User management schemas for admin operations
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from timetracker.schemas.base import BaseSchema


class UserListItem(BaseSchema):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    role_display_name: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class RoleChangeRequest(BaseSchema):
    # Kept as a plain string so unknown tags reach the role parser and fail with 400
    role: str = Field(..., description="One of admin, manager, project_manager, employee, viewer")


class RoleChangeResponse(BaseSchema):
    user_id: UUID
    role: str
    previous_role: str
    message: str


class LinkUserRequest(BaseSchema):
    user_id: Optional[UUID] = Field(None, description="User to link; null unlinks")


class RoleTestRequest(BaseSchema):
    role: str = Field(..., description="Role to act as")


class RoleTestStatus(BaseSchema):
    current_role: str
    real_role: str
    original_role: Optional[str] = None
    testing: bool
    can_test: bool
    started_at: Optional[datetime] = None
