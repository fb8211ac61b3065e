"""
Authentication Schemas
Pydantic models for authentication requests and responses
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import Field, field_validator

from timetracker.schemas.base import BaseSchema, validate_email, validate_non_empty_string


class LoginRequest(BaseSchema):
    """Login request schema"""
    email: str = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator('password')
    @classmethod
    def validate_password_not_empty(cls, v):
        return validate_non_empty_string(v)


class TokenResponse(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class UserProfile(BaseSchema):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime


class NavigationItem(BaseSchema):
    key: str
    label: str
    path: str


class ProjectControls(BaseSchema):
    can_create: bool
    can_edit: bool
    can_delete: bool
    can_assign_employees: bool
    can_create_tasks: bool
    can_edit_tasks: bool
    can_export: bool


class RoleTestState(BaseSchema):
    active: bool
    original_role: Optional[str] = None
    test_role: Optional[str] = None
    started_at: Optional[datetime] = None


class AuthContext(BaseSchema):
    """Everything the client needs to render role-dependent UI"""
    role: str
    real_role: str
    role_display_name: str
    permissions: dict[str, bool]
    predicates: dict[str, bool]
    navigation: List[NavigationItem]
    controls: ProjectControls
    role_test: RoleTestState
    department_id: Optional[UUID] = None
    organization_id: Optional[UUID] = None
    employee_id: Optional[UUID] = None


class MeResponse(BaseSchema):
    user: UserProfile
    auth: AuthContext


class CurrentRoleResponse(BaseSchema):
    role: str
    real_role: str
    role_display_name: str
    is_role_test: bool
    permissions: dict[str, bool]


class LoginResponse(BaseSchema):
    """Login response schema"""
    user: UserProfile = Field(..., description="User profile")
    tokens: TokenResponse = Field(..., description="Authentication tokens")
    message: str = Field("Login successful", description="Success message")


class RefreshTokenRequest(BaseSchema):
    refresh_token: str = Field(..., min_length=1)
