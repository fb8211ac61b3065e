"""
SQLAlchemy Models Package
TimeTracker Database Models
"""

from timetracker.models.user import User
from timetracker.models.organization import Organization, Department
from timetracker.models.employee import Employee
from timetracker.models.project import Project, ProjectEmployee, ProjectStatus
from timetracker.models.task import Task, TaskStatus
from timetracker.models.time_entry import TimeEntry
from timetracker.models.role_test import RoleTestSession

__all__ = [
    "User",
    "Organization",
    "Department",
    "Employee",
    "Project",
    "ProjectEmployee",
    "ProjectStatus",
    "Task",
    "TaskStatus",
    "TimeEntry",
    "RoleTestSession",
]
