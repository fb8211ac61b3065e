"""
API tests for projects: visibility, role-global editing and assignments.
"""

from datetime import timedelta

import pytest

from timetracker.core.rbac import Role
from timetracker.models import Project

pytestmark = pytest.mark.asyncio


async def test_employee_project_list_and_delete(client, factory, headers_for, today):
    employee = await factory.user(Role.EMPLOYEE)
    active = await factory.active_project("Website")
    await factory.ended_project("Legacy")
    await factory.project("Next year", start_date=today + timedelta(days=10))
    headers = headers_for(employee)

    response = await client.get("/api/v1/projects", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert [p["name"] for p in body["items"]] == ["Website"]
    assert body["items"][0]["status"] == "active"
    assert not any(body["controls"].values())

    delete = await client.delete(f"/api/v1/projects/{active.id}", headers=headers)
    assert delete.status_code == 404
    assert delete.json() == {"detail": "Not found"}

    still_there = await client.get(f"/api/v1/projects/{active.id}", headers=headers)
    assert still_there.status_code == 200


async def test_employee_cannot_read_inactive_project(client, factory, headers_for):
    employee = await factory.user(Role.EMPLOYEE)
    ended = await factory.ended_project()

    response = await client.get(f"/api/v1/projects/{ended.id}", headers=headers_for(employee))

    assert response.status_code == 404


async def test_manager_sees_every_project_with_status(client, factory, headers_for):
    manager = await factory.user(Role.MANAGER)
    await factory.active_project("Active")
    await factory.ended_project("Ended")

    response = await client.get("/api/v1/projects?sort_by=name", headers=headers_for(manager))

    statuses = {p["name"]: p["status"] for p in response.json()["items"]}
    assert statuses == {"Active": "active", "Ended": "ended"}


async def test_status_filter(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    await factory.active_project("Active")
    await factory.ended_project("Ended")

    response = await client.get("/api/v1/projects?status=ended", headers=headers_for(admin))

    assert [p["name"] for p in response.json()["items"]] == ["Ended"]


async def test_project_manager_edits_project_they_do_not_own(client, factory, headers_for, db):
    admin = await factory.user(Role.ADMIN)
    pm = await factory.user(Role.PROJECT_MANAGER)
    project = await factory.active_project("Owned by admin", owner=admin)

    response = await client.put(
        f"/api/v1/projects/{project.id}",
        json={"name": "Renamed by PM"},
        headers=headers_for(pm),
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed by PM"
    stored = await db.get(Project, project.id, populate_existing=True)
    assert stored.name == "Renamed by PM"
    assert stored.user_id == admin.id


async def test_project_manager_cannot_delete(client, factory, headers_for):
    pm = await factory.user(Role.PROJECT_MANAGER)
    project = await factory.active_project()

    response = await client.delete(f"/api/v1/projects/{project.id}", headers=headers_for(pm))

    assert response.status_code == 404


async def test_manager_cannot_edit_projects(client, factory, headers_for):
    manager = await factory.user(Role.MANAGER)
    project = await factory.active_project()

    response = await client.patch(
        f"/api/v1/projects/{project.id}", json={"name": "Nope"}, headers=headers_for(manager)
    )

    assert response.status_code == 404


async def test_create_project_sets_owner(client, factory, headers_for, today):
    pm = await factory.user(Role.PROJECT_MANAGER)

    response = await client.post(
        "/api/v1/projects",
        json={
            "name": "Launch",
            "project_number": "P-100",
            "start_date": today.isoformat(),
            "end_date": (today + timedelta(days=30)).isoformat(),
        },
        headers=headers_for(pm),
    )

    assert response.status_code == 201
    assert response.json()["user_id"] == str(pm.id)
    assert response.json()["status"] == "active"


async def test_end_date_before_start_date_is_rejected(client, factory, headers_for, today):
    admin = await factory.user(Role.ADMIN)
    project = await factory.active_project()

    response = await client.patch(
        f"/api/v1/projects/{project.id}",
        json={"end_date": (today - timedelta(days=365)).isoformat()},
        headers=headers_for(admin),
    )

    assert response.status_code == 400


async def test_assign_and_unassign_employee(client, factory, headers_for):
    pm = await factory.user(Role.PROJECT_MANAGER)
    project = await factory.active_project()
    employee = await factory.employee()
    headers = headers_for(pm)

    assigned = await client.post(
        f"/api/v1/projects/{project.id}/employees",
        json={"employee_id": str(employee.id)},
        headers=headers,
    )
    assert assigned.status_code == 201
    assert assigned.json()["assigned_by_id"] == str(pm.id)

    duplicate = await client.post(
        f"/api/v1/projects/{project.id}/employees",
        json={"employee_id": str(employee.id)},
        headers=headers,
    )
    assert duplicate.status_code == 409

    listed = await client.get(f"/api/v1/projects/{project.id}/employees", headers=headers)
    assert [e["id"] for e in listed.json()] == [str(employee.id)]

    removed = await client.delete(f"/api/v1/projects/{project.id}/employees/{employee.id}", headers=headers)
    assert removed.status_code == 200


async def test_admin_delete_removes_children(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    project = await factory.active_project()
    task = await factory.task(project)
    await factory.time_entry(admin, project, task=task)
    headers = headers_for(admin)

    response = await client.delete(f"/api/v1/projects/{project.id}", headers=headers)

    assert response.status_code == 200
    assert (await client.get(f"/api/v1/tasks/{task.id}", headers=headers)).status_code == 404
    assert (await client.get("/api/v1/time-entries", headers=headers)).json() == []
