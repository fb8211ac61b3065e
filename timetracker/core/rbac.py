"""
RBAC helpers and canonical role/capability definitions for TimeTracker.

Every role maps to a fixed capability set. Unknown role values resolve to the
employee role, never to an elevated one.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Iterable, Optional, Union

import structlog

from timetracker.core.exceptions import InvalidRole

logger = structlog.get_logger()


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    PROJECT_MANAGER = "project_manager"
    EMPLOYEE = "employee"
    VIEWER = "viewer"


class Capability(str, Enum):
    CREATE_PROJECTS = "canCreateProjects"
    EDIT_PROJECTS = "canEditProjects"
    DELETE_PROJECTS = "canDeleteProjects"
    MANAGE_EMPLOYEES = "canManageEmployees"
    VIEW_DEPARTMENT_DATA = "canViewDepartmentData"
    VIEW_ALL_PROJECTS = "canViewAllProjects"
    MANAGE_SYSTEM = "canManageSystem"
    CREATE_TASKS = "canCreateTasks"
    EDIT_TASKS = "canEditTasks"
    VIEW_REPORTS = "canViewReports"
    EXPORT_DATA = "canExportData"


DEFAULT_ROLE = Role.EMPLOYEE

ROLE_DISPLAY_NAMES: dict[Role, str] = {
    Role.ADMIN: "Admin",
    Role.MANAGER: "Department Manager",
    Role.PROJECT_MANAGER: "Project Manager",
    Role.EMPLOYEE: "Employee",
    Role.VIEWER: "Viewer",
}

RoleLike = Union[Role, str, None]


@dataclass(frozen=True)
class PermissionSet:
    canCreateProjects: bool = False
    canEditProjects: bool = False
    canDeleteProjects: bool = False
    canManageEmployees: bool = False
    canViewDepartmentData: bool = False
    canViewAllProjects: bool = False
    canManageSystem: bool = False
    canCreateTasks: bool = False
    canEditTasks: bool = False
    canViewReports: bool = False
    canExportData: bool = False

    def allows(self, capability: Union[Capability, str]) -> bool:
        return bool(getattr(self, Capability(capability).value))

    def granted(self) -> list[Capability]:
        return [capability for capability in Capability if self.allows(capability)]

    def to_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


ROLE_PERMISSIONS: dict[Role, PermissionSet] = {
    Role.ADMIN: PermissionSet(
        canCreateProjects=True,
        canEditProjects=True,
        canDeleteProjects=True,
        canManageEmployees=True,
        canViewDepartmentData=True,
        canViewAllProjects=True,
        canManageSystem=True,
        canCreateTasks=True,
        canEditTasks=True,
        canViewReports=True,
        canExportData=True,
    ),
    Role.MANAGER: PermissionSet(
        canManageEmployees=True,
        canViewDepartmentData=True,
        canViewAllProjects=True,
        canViewReports=True,
    ),
    Role.PROJECT_MANAGER: PermissionSet(
        canCreateProjects=True,
        canEditProjects=True,
        canViewAllProjects=True,
        canCreateTasks=True,
        canEditTasks=True,
        canViewReports=True,
    ),
    Role.EMPLOYEE: PermissionSet(),
    Role.VIEWER: PermissionSet(),
}

_missing_roles = set(Role) - set(ROLE_PERMISSIONS)
if _missing_roles:
    raise RuntimeError(f"Roles without a permission set: {sorted(r.value for r in _missing_roles)}")

_capability_names = {f.name for f in fields(PermissionSet)}
if _capability_names != {c.value for c in Capability}:
    raise RuntimeError("PermissionSet fields are out of sync with Capability")


def is_valid_role(value: RoleLike) -> bool:
    if isinstance(value, Role):
        return True
    if not isinstance(value, str):
        return False
    return value.strip().lower() in Role._value2member_map_


def resolve_role(value: RoleLike) -> Role:
    """
    Resolve a stored or requested role value to a Role.

    Unknown values fail closed to the employee role and are logged as an
    anomaly; missing values resolve silently to the default role.
    """
    if isinstance(value, Role):
        return value
    if isinstance(value, str) and is_valid_role(value):
        return Role(value.strip().lower())
    if value not in (None, ""):
        logger.warning("rbac.unknown_role", value=str(value), resolved=DEFAULT_ROLE.value)
    return DEFAULT_ROLE


def get_permissions(role: RoleLike) -> PermissionSet:
    return ROLE_PERMISSIONS[resolve_role(role)]


def has_capability(role: RoleLike, capability: Union[Capability, str]) -> bool:
    return get_permissions(role).allows(capability)


def has_role(role: RoleLike, required: RoleLike) -> bool:
    if not is_valid_role(required):
        return False
    return resolve_role(role) == resolve_role(required)


def has_any_role(role: RoleLike, roles: Iterable[RoleLike]) -> bool:
    resolved = resolve_role(role)
    return any(is_valid_role(r) and resolve_role(r) == resolved for r in roles)


def is_admin(role: RoleLike) -> bool:
    return resolve_role(role) == Role.ADMIN


def is_manager(role: RoleLike) -> bool:
    return resolve_role(role) == Role.MANAGER


def is_project_manager(role: RoleLike) -> bool:
    return resolve_role(role) == Role.PROJECT_MANAGER


def is_employee(role: RoleLike) -> bool:
    return resolve_role(role) == Role.EMPLOYEE


def is_viewer(role: RoleLike) -> bool:
    return resolve_role(role) == Role.VIEWER


@dataclass(frozen=True)
class RolePredicates:
    role: Role
    isAdmin: bool
    isManager: bool
    isProjectManager: bool
    isEmployee: bool
    isViewer: bool

    def has_role(self, required: RoleLike) -> bool:
        return has_role(self.role, required)

    def has_any_role(self, roles: Iterable[RoleLike]) -> bool:
        return has_any_role(self.role, roles)

    def to_dict(self) -> dict[str, bool]:
        return {
            "isAdmin": self.isAdmin,
            "isManager": self.isManager,
            "isProjectManager": self.isProjectManager,
            "isEmployee": self.isEmployee,
            "isViewer": self.isViewer,
        }


def get_role_predicates(role: RoleLike) -> RolePredicates:
    resolved = resolve_role(role)
    return RolePredicates(
        role=resolved,
        isAdmin=resolved == Role.ADMIN,
        isManager=resolved == Role.MANAGER,
        isProjectManager=resolved == Role.PROJECT_MANAGER,
        isEmployee=resolved == Role.EMPLOYEE,
        isViewer=resolved == Role.VIEWER,
    )


def display_name(role: RoleLike) -> str:
    return ROLE_DISPLAY_NAMES[resolve_role(role)]


def parse_role(value: Optional[str]) -> Role:
    """Strict parse for role-change requests; raises InvalidRole on unknown tags."""
    if not is_valid_role(value):
        logger.warning("rbac.invalid_role_request", value=str(value))
        raise InvalidRole(value)
    return resolve_role(value)
