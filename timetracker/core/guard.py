"""
Authorization guard.

Every protected operation is described by an AccessRequirement and evaluated
against the request's ActorContext. Gates run in a fixed order
(authentication, role, permission) and stop at the first failure.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Literal, Optional, Union

from timetracker.core.context import ActorContext
from timetracker.core.exceptions import AccessDenied, NotAuthenticated
from timetracker.core.logging import get_audit_logger
from timetracker.core.rbac import Capability, Role, resolve_role

GATE_AUTHENTICATION = "authentication"
GATE_ROLE = "role"
GATE_PERMISSION = "permission"

MatchMode = Literal["all", "any"]


def _roles(values: Iterable[Union[Role, str]]) -> tuple[Role, ...]:
    return tuple(resolve_role(v) for v in values)


def _capabilities(values: Iterable[Union[Capability, str]]) -> tuple[Capability, ...]:
    return tuple(Capability(v) for v in values)


@dataclass(frozen=True)
class AccessRequirement:
    required_roles: tuple[Role, ...] = ()
    required_permissions: tuple[Capability, ...] = ()
    block_roles: tuple[Role, ...] = ()
    match: MatchMode = "all"

    @classmethod
    def build(
        cls,
        required_roles: Iterable[Union[Role, str]] = (),
        required_permissions: Iterable[Union[Capability, str]] = (),
        block_roles: Iterable[Union[Role, str]] = (),
        match: MatchMode = "all",
    ) -> "AccessRequirement":
        if match not in ("all", "any"):
            raise ValueError(f"match must be 'all' or 'any', got {match!r}")
        return cls(
            required_roles=_roles(required_roles),
            required_permissions=_capabilities(required_permissions),
            block_roles=_roles(block_roles),
            match=match,
        )


AUTHENTICATED = AccessRequirement()


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    gate: Optional[str] = None
    reason: Optional[str] = None


def evaluate_access(actor: Optional[ActorContext], requirement: AccessRequirement) -> GuardDecision:
    if actor is None:
        return GuardDecision(False, GATE_AUTHENTICATION, "not authenticated")

    if actor.role in requirement.block_roles:
        return GuardDecision(False, GATE_ROLE, f"role {actor.role.value} is blocked")
    if requirement.required_roles and actor.role not in requirement.required_roles:
        return GuardDecision(False, GATE_ROLE, f"role {actor.role.value} is not allowed")

    if requirement.required_permissions:
        granted = [actor.can(c) for c in requirement.required_permissions]
        ok = any(granted) if requirement.match == "any" else all(granted)
        if not ok:
            missing = [c.value for c, g in zip(requirement.required_permissions, granted) if not g]
            return GuardDecision(False, GATE_PERMISSION, f"missing {', '.join(missing)}")

    return GuardDecision(True)


def authorize(
    actor: Optional[ActorContext],
    requirement: AccessRequirement,
    operation: str,
    target: Any = None,
) -> ActorContext:
    """Evaluate a requirement, audit the decision, and raise on denial"""
    decision = evaluate_access(actor, requirement)
    audit = get_audit_logger()
    target_ref = None if target is None else str(target)

    if decision.allowed:
        audit.debug(
            "authz.granted",
            operation=operation,
            target=target_ref,
            **actor.log_context(),
        )
        return actor

    audit.warning(
        "authz.denied",
        operation=operation,
        target=target_ref,
        gate=decision.gate,
        reason=decision.reason,
        **(actor.log_context() if actor is not None else {"actor_id": None, "role": None}),
    )
    if decision.gate == GATE_AUTHENTICATION:
        raise NotAuthenticated()
    raise AccessDenied(decision.reason, operation=operation, gate=decision.gate)


class AccessDeniedResult:
    """Sentinel returned by guarded operations instead of raising"""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ACCESS_DENIED"


ACCESS_DENIED = AccessDeniedResult()


def guarded(requirement: AccessRequirement, operation: str):
    """
    Wrap an async operation whose first argument is the actor.

    Denials return ACCESS_DENIED instead of raising, so callers that render
    partial results can simply skip the denied part.
    """

    def decorator(func: Callable[..., Awaitable[Any]]):
        @functools.wraps(func)
        async def wrapper(actor: Optional[ActorContext], *args, **kwargs):
            try:
                authorize(actor, requirement, operation)
            except (NotAuthenticated, AccessDenied):
                return ACCESS_DENIED
            return await func(actor, *args, **kwargs)

        wrapper.requirement = requirement
        return wrapper

    return decorator


def build_ui_affordances(actor: ActorContext) -> dict:
    """Navigation entries and project controls the client should render"""
    can = actor.can
    navigation = [
        {"key": "dashboard", "label": "Dashboard", "path": "/"},
        {"key": "time_entry", "label": "Time Entry", "path": "/time-entry"},
        {"key": "time_log", "label": "Time Log", "path": "/time-log"},
    ]
    if can(Capability.VIEW_ALL_PROJECTS):
        navigation.append({"key": "projects", "label": "Projects", "path": "/projects"})
    if can(Capability.CREATE_TASKS) or can(Capability.EDIT_TASKS):
        navigation.append({"key": "tasks", "label": "Tasks", "path": "/tasks"})
    if can(Capability.VIEW_REPORTS):
        navigation.append({"key": "reports", "label": "Reports", "path": "/reports"})
    if can(Capability.MANAGE_EMPLOYEES):
        navigation.append({"key": "employees", "label": "Employees", "path": "/employees"})
    if can(Capability.VIEW_DEPARTMENT_DATA):
        navigation.append({"key": "departments", "label": "Departments", "path": "/departments"})
    if actor.is_admin:
        navigation.append({"key": "organizations", "label": "Organizations", "path": "/organizations"})
        navigation.append({"key": "user_management", "label": "User Management", "path": "/admin/users"})
    if actor.is_admin or actor.is_role_test:
        navigation.append({"key": "role_testing", "label": "Role Testing", "path": "/admin/role-testing"})

    controls = project_controls(actor)
    return {"navigation": navigation, "controls": controls}


def project_controls(actor: ActorContext) -> dict[str, bool]:
    can = actor.can
    return {
        "can_create": can(Capability.CREATE_PROJECTS),
        "can_edit": can(Capability.EDIT_PROJECTS),
        "can_delete": can(Capability.DELETE_PROJECTS),
        "can_assign_employees": can(Capability.EDIT_PROJECTS),
        "can_create_tasks": can(Capability.CREATE_TASKS),
        "can_edit_tasks": can(Capability.EDIT_TASKS),
        "can_export": can(Capability.EXPORT_DATA),
    }
