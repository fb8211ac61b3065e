"""
Tests for the authorization guard: gate order, list composition and
UI affordances.
"""

from uuid import uuid4

import pytest

from timetracker.core.context import ActorContext
from timetracker.core.exceptions import AccessDenied, NotAuthenticated
from timetracker.core.guard import (
    ACCESS_DENIED,
    GATE_AUTHENTICATION,
    GATE_PERMISSION,
    GATE_ROLE,
    AccessRequirement,
    authorize,
    build_ui_affordances,
    evaluate_access,
    guarded,
)
from timetracker.core.rbac import Capability, Role


def make_actor(role: Role, **kwargs) -> ActorContext:
    return ActorContext.for_role(uuid4(), f"{role.value}@example.com", role, **kwargs)


# ── Gate order ──────────────────────────────────────────────────


def test_missing_actor_fails_authentication_first():
    requirement = AccessRequirement.build(
        required_roles=[Role.ADMIN], required_permissions=[Capability.MANAGE_SYSTEM]
    )
    decision = evaluate_access(None, requirement)
    assert decision.allowed is False
    assert decision.gate == GATE_AUTHENTICATION


def test_role_gate_runs_before_permission_gate():
    requirement = AccessRequirement.build(
        required_roles=[Role.ADMIN], required_permissions=[Capability.MANAGE_SYSTEM]
    )
    decision = evaluate_access(make_actor(Role.VIEWER), requirement)
    assert decision.gate == GATE_ROLE


def test_permission_gate():
    requirement = AccessRequirement.build(required_permissions=[Capability.DELETE_PROJECTS])
    decision = evaluate_access(make_actor(Role.PROJECT_MANAGER), requirement)
    assert decision.gate == GATE_PERMISSION
    assert "canDeleteProjects" in decision.reason


def test_block_and_allow_lists_combine_with_and():
    requirement = AccessRequirement.build(
        required_roles=[Role.ADMIN, Role.MANAGER], block_roles=[Role.MANAGER]
    )
    assert evaluate_access(make_actor(Role.ADMIN), requirement).allowed is True
    assert evaluate_access(make_actor(Role.MANAGER), requirement).allowed is False
    assert evaluate_access(make_actor(Role.VIEWER), requirement).allowed is False


def test_block_list_alone():
    requirement = AccessRequirement.build(block_roles=[Role.VIEWER])
    assert evaluate_access(make_actor(Role.EMPLOYEE), requirement).allowed is True
    assert evaluate_access(make_actor(Role.VIEWER), requirement).gate == GATE_ROLE


def test_permissions_default_to_all():
    requirement = AccessRequirement.build(
        required_permissions=[Capability.VIEW_REPORTS, Capability.EXPORT_DATA]
    )
    assert evaluate_access(make_actor(Role.MANAGER), requirement).allowed is False
    assert evaluate_access(make_actor(Role.ADMIN), requirement).allowed is True


def test_permissions_match_any():
    requirement = AccessRequirement.build(
        required_permissions=[Capability.CREATE_TASKS, Capability.MANAGE_EMPLOYEES], match="any"
    )
    assert evaluate_access(make_actor(Role.MANAGER), requirement).allowed is True
    assert evaluate_access(make_actor(Role.PROJECT_MANAGER), requirement).allowed is True
    assert evaluate_access(make_actor(Role.EMPLOYEE), requirement).allowed is False


def test_invalid_match_mode_is_rejected():
    with pytest.raises(ValueError):
        AccessRequirement.build(match="most")


def test_authenticated_requirement_allows_every_role():
    for role in Role:
        assert evaluate_access(make_actor(role), AccessRequirement()).allowed is True


# ── authorize / guarded ─────────────────────────────────────────


def test_authorize_raises_not_authenticated_for_missing_actor():
    with pytest.raises(NotAuthenticated):
        authorize(None, AccessRequirement(), "test.op")


def test_authorize_raises_access_denied_for_role_failure():
    requirement = AccessRequirement.build(required_roles=[Role.ADMIN])
    with pytest.raises(AccessDenied) as exc_info:
        authorize(make_actor(Role.MANAGER), requirement, "test.op", target="x")

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Not found"


def test_authorize_returns_actor_on_success():
    actor = make_actor(Role.ADMIN)
    assert authorize(actor, AccessRequirement.build(required_roles=[Role.ADMIN]), "test.op") is actor


@pytest.mark.asyncio
async def test_guarded_returns_sentinel_instead_of_raising():
    calls = []

    @guarded(AccessRequirement.build(required_permissions=[Capability.EXPORT_DATA]), "test.export")
    async def export(actor, value):
        calls.append(value)
        return f"exported {value}"

    assert await export(make_actor(Role.ADMIN), 1) == "exported 1"
    assert await export(make_actor(Role.MANAGER), 2) is ACCESS_DENIED
    assert await export(None, 3) is ACCESS_DENIED
    assert calls == [1]
    assert not ACCESS_DENIED


# ── Affordances ─────────────────────────────────────────────────


def _nav_keys(actor):
    return [item["key"] for item in build_ui_affordances(actor)["navigation"]]


def test_employee_affordances():
    affordances = build_ui_affordances(make_actor(Role.EMPLOYEE))
    assert _nav_keys(make_actor(Role.EMPLOYEE)) == ["dashboard", "time_entry", "time_log"]
    assert not any(affordances["controls"].values())


def test_project_manager_affordances():
    actor = make_actor(Role.PROJECT_MANAGER)
    keys = _nav_keys(actor)
    assert {"projects", "tasks", "reports"} <= set(keys)
    assert "employees" not in keys
    controls = build_ui_affordances(actor)["controls"]
    assert controls["can_create"] and controls["can_edit"]
    assert controls["can_delete"] is False
    assert controls["can_export"] is False


def test_admin_sees_every_navigation_item():
    keys = _nav_keys(make_actor(Role.ADMIN))
    assert {"organizations", "user_management", "role_testing", "departments", "employees"} <= set(keys)


def test_role_test_keeps_role_testing_entry():
    actor = make_actor(Role.VIEWER, real_role=Role.ADMIN)
    keys = _nav_keys(actor)
    assert actor.is_role_test is True
    assert "role_testing" in keys
    assert "user_management" not in keys
