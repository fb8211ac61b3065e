"""
Row-level scoping rules.

Each entity has pure predicates (used on loaded records and in tests) and a
matching SQL clause builder (used by repositories). A clause builder returns
None when the actor is unrestricted. The two forms must always agree.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, false, or_
from sqlalchemy.sql.elements import ColumnElement

from timetracker.core.context import ActorContext
from timetracker.core.rbac import Capability
from timetracker.core.timekeeping import is_project_active
from timetracker.models.employee import Employee
from timetracker.models.organization import Department, Organization
from timetracker.models.project import Project
from timetracker.models.task import TaskStatus
from timetracker.models.time_entry import TimeEntry
from timetracker.models.user import User

Clause = Optional[ColumnElement]


def _unrestricted(actor: ActorContext) -> bool:
    return actor.can(Capability.MANAGE_SYSTEM)


def _same_id(left: Any, right: Any) -> bool:
    return left is not None and right is not None and str(left) == str(right)


# Projects

def can_view_project(actor: ActorContext, project: Project, *, today: date) -> bool:
    if actor.can(Capability.VIEW_ALL_PROJECTS):
        return True
    return is_project_active(project.start_date, project.end_date, today)


def project_visibility_clause(actor: ActorContext, *, today: date) -> Clause:
    if actor.can(Capability.VIEW_ALL_PROJECTS):
        return None
    return active_project_clause(today)


def active_project_clause(today: date) -> ColumnElement:
    return and_(
        or_(Project.start_date.is_(None), Project.start_date <= today),
        or_(Project.end_date.is_(None), Project.end_date >= today),
    )


def can_create_project(actor: ActorContext) -> bool:
    return actor.can(Capability.CREATE_PROJECTS)


def can_edit_project(actor: ActorContext, project: Project) -> bool:
    # Role-global: any holder of the capability may edit any project
    return actor.can(Capability.EDIT_PROJECTS)


def can_delete_project(actor: ActorContext, project: Project) -> bool:
    return actor.can(Capability.DELETE_PROJECTS)


def can_assign_project_employees(actor: ActorContext, project: Project) -> bool:
    return actor.can(Capability.EDIT_PROJECTS)


# Tasks

def can_view_task(actor: ActorContext, task: Any, project: Project, *, today: date) -> bool:
    return can_view_project(actor, project, today=today)


def task_visibility_clause(actor: ActorContext, *, today: date) -> Clause:
    """Applies to a query joined with Project"""
    return project_visibility_clause(actor, today=today)


def can_create_task(actor: ActorContext, project: Project) -> bool:
    return actor.can(Capability.CREATE_TASKS)


def can_edit_task(actor: ActorContext, task: Any) -> bool:
    return actor.can(Capability.EDIT_TASKS)


def can_delete_task(actor: ActorContext, task: Any) -> bool:
    return actor.can(Capability.EDIT_TASKS)


def can_clone_task(actor: ActorContext, task: Any) -> bool:
    return actor.can(Capability.CREATE_TASKS)


def is_task_selectable(task: Any, project: Project, *, today: date) -> bool:
    return task.status != TaskStatus.ARCHIVED.value and is_project_active(
        project.start_date, project.end_date, today
    )


# Employees

def can_view_employee(actor: ActorContext, employee: Employee) -> bool:
    if actor.can(Capability.VIEW_DEPARTMENT_DATA) or actor.can(Capability.VIEW_ALL_PROJECTS):
        return True
    return _same_id(employee.user_id, actor.user_id)


def employee_visibility_clause(actor: ActorContext) -> Clause:
    if actor.can(Capability.VIEW_DEPARTMENT_DATA) or actor.can(Capability.VIEW_ALL_PROJECTS):
        return None
    return Employee.user_id == actor.user_id


def can_manage_department_members(actor: ActorContext, department: Optional[str]) -> bool:
    """Whether the actor may create or mutate employees in the given department"""
    if not actor.can(Capability.MANAGE_EMPLOYEES):
        return False
    if _unrestricted(actor):
        return True
    # Managers are bounded by their own department; none means none
    return _same_id(department, actor.department_id)


def can_mutate_employee(actor: ActorContext, employee: Employee) -> bool:
    return can_manage_department_members(actor, employee.department)


# Departments

def can_view_department(actor: ActorContext, department: Department) -> bool:
    if actor.can(Capability.VIEW_DEPARTMENT_DATA):
        return True
    return _same_id(department.id, actor.department_id)


def department_visibility_clause(actor: ActorContext) -> Clause:
    if actor.can(Capability.VIEW_DEPARTMENT_DATA):
        return None
    if actor.department_id is None:
        return false()
    return Department.id == actor.department_id


def can_manage_departments(actor: ActorContext) -> bool:
    return actor.can(Capability.MANAGE_SYSTEM)


# Organizations

def can_view_organization(actor: ActorContext, organization: Organization) -> bool:
    if _unrestricted(actor):
        return True
    return _same_id(organization.id, actor.organization_id)


def organization_visibility_clause(actor: ActorContext) -> Clause:
    if _unrestricted(actor):
        return None
    if actor.organization_id is None:
        return false()
    return Organization.id == actor.organization_id


def can_manage_organizations(actor: ActorContext) -> bool:
    return actor.can(Capability.MANAGE_SYSTEM)


# Time entries

def _sees_all_time_entries(actor: ActorContext) -> bool:
    return _unrestricted(actor) or actor.can(Capability.VIEW_DEPARTMENT_DATA)


def can_view_time_entry(actor: ActorContext, entry: TimeEntry) -> bool:
    if _sees_all_time_entries(actor):
        return True
    return _same_id(entry.user_id, actor.user_id)


def time_entry_visibility_clause(actor: ActorContext) -> Clause:
    if _sees_all_time_entries(actor):
        return None
    return TimeEntry.user_id == actor.user_id


def can_log_time_for(actor: ActorContext, user_id: UUID) -> bool:
    return _unrestricted(actor) or _same_id(user_id, actor.user_id)


def can_mutate_time_entry(
    actor: ActorContext,
    entry: TimeEntry,
    project: Optional[Project],
    task: Any = None,
    *,
    today: date,
) -> bool:
    if _unrestricted(actor):
        return True
    if not _same_id(entry.user_id, actor.user_id):
        return False
    if project is None or not is_project_active(project.start_date, project.end_date, today):
        return False
    return task is None or task.status != TaskStatus.ARCHIVED.value


# Users

def can_view_user(actor: ActorContext, user: User) -> bool:
    return _unrestricted(actor) or _same_id(user.id, actor.user_id)


def user_visibility_clause(actor: ActorContext) -> Clause:
    if _unrestricted(actor):
        return None
    return User.id == actor.user_id


def can_change_roles(actor: ActorContext) -> bool:
    """Role changes are checked against the persisted role, never a test role"""
    return actor.is_real_admin
