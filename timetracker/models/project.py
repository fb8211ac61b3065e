"""
Project Models
Projects, their derived date-window status, and employee assignments
"""

import enum
from datetime import date
from typing import Optional

from sqlalchemy import Column, String, Text, Boolean, Date, ForeignKey, UniqueConstraint, Uuid

from timetracker.core.timekeeping import is_project_active, project_status
from timetracker.models.base import BaseModel


class ProjectStatus(enum.Enum):
    """Status derived from the project's date window"""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"


class Project(BaseModel):
    __tablename__ = "projects"

    name = Column(String(255), nullable=False, index=True)
    project_number = Column(String(50), nullable=True, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(7), default="#1976D2", nullable=False)
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True, index=True)
    is_enterprise_wide = Column(Boolean, default=True, nullable=False)

    # Creator; never used for authorization
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    def __repr__(self):
        return f"<Project(name='{self.name}')>"

    def status_on(self, on: date) -> ProjectStatus:
        return ProjectStatus(project_status(self.start_date, self.end_date, on))

    def is_active_on(self, on: Optional[date]) -> bool:
        return is_project_active(self.start_date, self.end_date, on)


class ProjectEmployee(BaseModel):
    __tablename__ = "project_employees"

    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(Uuid(as_uuid=True), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        UniqueConstraint("project_id", "employee_id", name="uq_project_employee"),
    )
