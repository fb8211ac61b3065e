"""
Dashboard and Report Schemas
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from timetracker.schemas.base import BaseSchema


class DashboardStats(BaseSchema):
    today_hours: float
    week_hours: float
    month_hours: float
    active_projects: int
    total_hours: float
    total_entries: int
    total_projects: int
    average_hours_per_day: float
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectBreakdownItem(BaseSchema):
    project_id: UUID
    name: str
    color: Optional[str] = None
    hours: float
    entries: int
    percentage: float


class RecentActivityItem(BaseSchema):
    id: UUID
    date: date
    duration: float
    description: Optional[str] = None
    project: Optional[str] = None
    task: Optional[str] = None
    user_email: Optional[str] = None


class DepartmentHoursItem(BaseSchema):
    department: str
    hours: float


class ProjectReportEntry(BaseSchema):
    id: UUID
    date: date
    start_time: str
    end_time: str
    duration: float
    description: Optional[str] = None
    task: Optional[str] = None
    user_email: Optional[str] = None
    employee_name: Optional[str] = None


class ProjectReport(BaseSchema):
    project_id: UUID
    project_name: str
    total_hours: float
    entries: List[ProjectReportEntry]
