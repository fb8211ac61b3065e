"""
Time Entry Model
Hours logged by a user against a project and optional task
"""

from sqlalchemy import Column, String, Text, Date, Float, ForeignKey, Index, Uuid

from timetracker.models.base import BaseModel


class TimeEntry(BaseModel):
    __tablename__ = "time_entries"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Uuid(as_uuid=True), ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)

    # Hours, two decimals
    duration = Column(Float, nullable=False)

    __table_args__ = (
        Index('ix_time_entry_user_date', 'user_id', 'date'),
    )

    def __repr__(self):
        return f"<TimeEntry(date='{self.date}', duration={self.duration})>"
