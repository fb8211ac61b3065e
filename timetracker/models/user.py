"""
User Model
Authentication identity and the persisted role tag
"""

from sqlalchemy import Column, String, Boolean, DateTime, Index

from timetracker.core.rbac import Role
from timetracker.models.base import BaseModel


class User(BaseModel):
    """User account; `role` is the only authorization-relevant attribute"""
    __tablename__ = "users"

    email = Column(String(254), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # Null for accounts provisioned by an external identity provider
    hashed_password = Column(String(128), nullable=True)

    role = Column(String(32), default=Role.EMPLOYEE.value, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_user_email_active', 'email', 'is_active'),
    )

    def __repr__(self):
        return f"<User(email='{self.email}', role='{self.role}')>"

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.email
