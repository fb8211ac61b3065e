"""
Task Model
"""

import enum

from sqlalchemy import Column, String, Text, ForeignKey, Index, Uuid

from timetracker.models.base import BaseModel


class TaskStatus(enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Task(BaseModel):
    __tablename__ = "tasks"

    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default=TaskStatus.ACTIVE.value, nullable=False, index=True)

    __table_args__ = (
        Index('ix_task_project_status', 'project_id', 'status'),
    )

    def __repr__(self):
        return f"<Task(name='{self.name}', status='{self.status}')>"

    @property
    def is_archived(self) -> bool:
        return self.status == TaskStatus.ARCHIVED.value
