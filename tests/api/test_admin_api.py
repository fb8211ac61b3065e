"""
API tests for user administration and admin role testing.
"""

import pytest

from timetracker.core.rbac import Role
from timetracker.models import RoleTestSession

pytestmark = pytest.mark.asyncio


async def test_role_change_applies_on_next_request(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    target = await factory.user(Role.EMPLOYEE)

    before = await client.get("/api/v1/projects", headers=headers_for(target))
    assert before.status_code == 200

    response = await client.post(
        f"/api/v1/admin/users/{target.id}/role",
        json={"role": "project_manager"},
        headers=headers_for(admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert (body["role"], body["previous_role"]) == ("project_manager", "employee")

    # Same token as before; the role is re-read from the database
    current = await client.get("/api/v1/auth/current-role", headers=headers_for(target))
    assert current.json()["role"] == "project_manager"
    assert current.json()["permissions"]["canCreateProjects"] is True


async def test_unknown_role_is_rejected_without_mutation(client, factory, headers_for, db):
    admin = await factory.user(Role.ADMIN)
    target = await factory.user(Role.VIEWER)

    response = await client.post(
        f"/api/v1/admin/users/{target.id}/role",
        json={"role": "superuser"},
        headers=headers_for(admin),
    )

    assert response.status_code == 400
    assert "viewer" in response.json()["detail"]
    await db.refresh(target)
    assert target.role == "viewer"


async def test_admin_cannot_demote_themselves(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)

    response = await client.post(
        f"/api/v1/admin/users/{admin.id}/role",
        json={"role": "employee"},
        headers=headers_for(admin),
    )

    assert response.status_code == 400


@pytest.mark.parametrize("role", [Role.MANAGER, Role.PROJECT_MANAGER, Role.EMPLOYEE, Role.VIEWER])
async def test_non_admins_cannot_change_roles(client, factory, headers_for, db, role):
    caller = await factory.user(role)
    target = await factory.user(Role.EMPLOYEE)

    response = await client.post(
        f"/api/v1/admin/users/{target.id}/role",
        json={"role": "admin"},
        headers=headers_for(caller),
    )

    assert response.status_code == 404
    await db.refresh(target)
    assert target.role == "employee"


async def test_role_change_for_missing_user(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)

    response = await client.post(
        "/api/v1/admin/users/00000000-0000-0000-0000-000000000000/role",
        json={"role": "viewer"},
        headers=headers_for(admin),
    )

    assert response.status_code == 404


async def test_user_list_is_admin_only(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    manager = await factory.user(Role.MANAGER)

    listed = await client.get("/api/v1/admin/users", headers=headers_for(admin))
    assert listed.status_code == 200
    assert {u["email"] for u in listed.json()} == {admin.email, manager.email}

    denied = await client.get("/api/v1/admin/users", headers=headers_for(manager))
    assert denied.status_code == 404

    anonymous = await client.get("/api/v1/admin/users")
    assert anonymous.status_code == 401


async def test_role_test_start_status_restore(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    headers = headers_for(admin)

    started = await client.post("/api/v1/admin/test-role", json={"role": "employee"}, headers=headers)
    assert started.status_code == 200
    assert started.json()["testing"] is True

    # While testing, the admin is treated as an employee
    denied = await client.get("/api/v1/admin/users", headers=headers)
    assert denied.status_code == 404
    status = (await client.get("/api/v1/admin/test-status", headers=headers)).json()
    assert (status["current_role"], status["real_role"], status["testing"]) == ("employee", "admin", True)

    restored = await client.post("/api/v1/admin/restore-role", headers=headers)
    assert restored.status_code == 200
    assert restored.json()["current_role"] == "admin"
    assert (await client.get("/api/v1/admin/users", headers=headers)).status_code == 200


async def test_role_test_rejects_unknown_role(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)

    response = await client.post("/api/v1/admin/test-role", json={"role": "root"}, headers=headers_for(admin))

    assert response.status_code == 400


async def test_non_admin_cannot_start_role_test(client, factory, headers_for):
    manager = await factory.user(Role.MANAGER)

    response = await client.post("/api/v1/admin/test-role", json={"role": "admin"}, headers=headers_for(manager))

    assert response.status_code == 404


async def test_stale_role_test_session_is_ignored_after_demotion(client, factory, headers_for, db):
    demoted = await factory.user(Role.EMPLOYEE)
    db.add(RoleTestSession(user_id=demoted.id, original_role="admin", test_role="admin"))
    await db.commit()

    current = (await client.get("/api/v1/auth/current-role", headers=headers_for(demoted))).json()

    assert current["role"] == "employee"
    assert current["is_role_test"] is False


async def test_create_and_list_test_users(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    headers = headers_for(admin)

    created = await client.post("/api/v1/admin/test-users", headers=headers)
    assert created.status_code == 201
    assert sorted(u["role"] for u in created.json()) == sorted(r.value for r in Role)

    # Idempotent
    again = await client.post("/api/v1/admin/test-users", headers=headers)
    assert len(again.json()) == len(Role)

    listed = await client.get("/api/v1/admin/test-users", headers=headers)
    emails = {u["email"] for u in listed.json()}
    assert "test.project-manager@timetracker.local" in emails
    assert admin.email not in emails


async def test_test_users_cannot_log_in(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    await client.post("/api/v1/admin/test-users", headers=headers_for(admin))

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test.employee@timetracker.local", "password": "anything"},
    )

    assert response.status_code == 401


async def test_link_user_to_employee(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    user = await factory.user(Role.EMPLOYEE)
    employee = await factory.employee()
    headers = headers_for(admin)

    unlinked = await client.get("/api/v1/admin/users/without-employee", headers=headers)
    assert str(user.id) in {u["id"] for u in unlinked.json()}

    linked = await client.post(
        f"/api/v1/admin/employees/{employee.id}/link-user", json={"user_id": str(user.id)}, headers=headers
    )
    assert linked.status_code == 200
    assert linked.json()["user_id"] == str(user.id)

    other = await factory.employee()
    conflict = await client.post(
        f"/api/v1/admin/employees/{other.id}/link-user", json={"user_id": str(user.id)}, headers=headers
    )
    assert conflict.status_code == 409
