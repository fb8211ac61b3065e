"""
API tests for organizations and departments.
"""

import pytest

from timetracker.core.rbac import Role

pytestmark = pytest.mark.asyncio


async def test_admin_builds_structure(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    headers = headers_for(admin)

    organization = await client.post("/api/v1/organizations", json={"name": "Acme"}, headers=headers)
    assert organization.status_code == 201
    org_id = organization.json()["id"]

    department = await client.post(
        "/api/v1/departments", json={"name": "Engineering", "organization_id": org_id}, headers=headers
    )
    assert department.status_code == 201

    listed = await client.get(f"/api/v1/organizations/{org_id}/departments", headers=headers)
    assert [d["name"] for d in listed.json()] == ["Engineering"]


async def test_set_department_manager(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    organization = await factory.organization()
    department = await factory.department(organization)
    lead = await factory.employee(department=department)
    headers = headers_for(admin)

    response = await client.post(
        f"/api/v1/departments/{department.id}/manager", json={"employee_id": str(lead.id)}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["manager_id"] == str(lead.id)

    missing = await client.post(
        f"/api/v1/departments/{department.id}/manager",
        json={"employee_id": "00000000-0000-0000-0000-000000000000"},
        headers=headers,
    )
    assert missing.status_code == 404


@pytest.mark.parametrize("role", [Role.MANAGER, Role.PROJECT_MANAGER, Role.EMPLOYEE])
async def test_structure_changes_need_system_permission(client, factory, headers_for, role):
    caller = await factory.user(role)

    response = await client.post("/api/v1/organizations", json={"name": "Rogue"}, headers=headers_for(caller))

    assert response.status_code == 404


async def test_employee_sees_only_own_department(client, factory, headers_for):
    organization = await factory.organization()
    own = await factory.department(organization, "Engineering")
    await factory.department(organization, "Sales")
    user = await factory.user(Role.EMPLOYEE)
    await factory.employee(department=own, user=user)

    response = await client.get("/api/v1/departments", headers=headers_for(user))

    assert [d["id"] for d in response.json()] == [str(own.id)]


async def test_unlinked_employee_sees_no_departments(client, factory, headers_for):
    organization = await factory.organization()
    await factory.department(organization)
    user = await factory.user(Role.EMPLOYEE)

    response = await client.get("/api/v1/departments", headers=headers_for(user))

    assert response.json() == []
