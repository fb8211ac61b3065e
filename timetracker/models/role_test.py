"""
Role Test Session Model
Lets an admin act as another role without touching the persisted role
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid

from timetracker.models.base import BaseModel, utcnow


class RoleTestSession(BaseModel):
    __tablename__ = "role_test_sessions"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    original_role = Column(String(32), nullable=False)
    test_role = Column(String(32), nullable=False)
    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
