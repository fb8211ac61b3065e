"""
API tests for time entries: scope, duration derivation and locking rules.
"""

from datetime import timedelta

import pytest

from timetracker.core.rbac import Role

pytestmark = pytest.mark.asyncio


async def test_manual_duration_starts_at_nine(client, factory, headers_for, today):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={"project_id": str(project.id), "date": today.isoformat(), "duration": 3.5},
        headers=headers_for(employee),
    )

    assert response.status_code == 201
    body = response.json()
    assert (body["start_time"], body["end_time"], body["duration"]) == ("09:00", "12:30", 3.5)
    assert body["user_id"] == str(employee.id)


async def test_duration_from_times(client, factory, headers_for, today):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={
            "project_id": str(project.id),
            "date": today.isoformat(),
            "start_time": "09:00",
            "end_time": "12:30",
        },
        headers=headers_for(employee),
    )

    assert response.status_code == 201
    assert response.json()["duration"] == 3.5


@pytest.mark.parametrize("start, end", [("10:00", "10:00"), ("12:30", "09:00")])
async def test_equal_or_reversed_times_are_rejected(client, factory, headers_for, today, start, end):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={"project_id": str(project.id), "date": today.isoformat(), "start_time": start, "end_time": end},
        headers=headers_for(employee),
    )

    assert response.status_code == 400


async def test_archived_task_is_rejected(client, factory, headers_for, today):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()
    task = await factory.task(project, status="archived")

    response = await client.post(
        "/api/v1/time-entries",
        json={"project_id": str(project.id), "task_id": str(task.id), "date": today.isoformat(), "duration": 1},
        headers=headers_for(employee),
    )

    assert response.status_code == 400
    assert "archived" in response.json()["detail"]


async def test_inactive_project_is_rejected_for_non_admins(client, factory, headers_for, today):
    pm = await factory.user(Role.PROJECT_MANAGER)
    project = await factory.ended_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={"project_id": str(project.id), "date": today.isoformat(), "duration": 1},
        headers=headers_for(pm),
    )

    assert response.status_code == 400


async def test_admin_logs_time_for_another_user_on_ended_project(client, factory, headers_for, today):
    admin = await factory.user(Role.ADMIN)
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.ended_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={
            "project_id": str(project.id),
            "date": (today - timedelta(days=5)).isoformat(),
            "duration": 2,
            "user_id": str(employee.id),
        },
        headers=headers_for(admin),
    )

    assert response.status_code == 201
    assert response.json()["user_id"] == str(employee.id)


async def test_employee_cannot_log_time_for_someone_else(client, factory, headers_for, today):
    employee = await factory.user(Role.EMPLOYEE)
    other = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={"project_id": str(project.id), "date": today.isoformat(), "duration": 1, "user_id": str(other.id)},
        headers=headers_for(employee),
    )

    assert response.status_code == 404


@pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER])
async def test_admin_and_manager_see_every_entry(client, factory, headers_for, role):
    viewer = await factory.user(role)
    project = await factory.active_project()
    for _ in range(3):
        await factory.time_entry(await factory.user(Role.EMPLOYEE), project)

    response = await client.get("/api/v1/time-entries", headers=headers_for(viewer))

    assert len(response.json()) == 3


@pytest.mark.parametrize("role", [Role.PROJECT_MANAGER, Role.EMPLOYEE, Role.VIEWER])
async def test_other_roles_see_only_their_own_entries(client, factory, headers_for, role):
    user = await factory.user(role)
    project = await factory.active_project()
    own = await factory.time_entry(user, project)
    foreign = await factory.time_entry(await factory.user(Role.EMPLOYEE), project)
    headers = headers_for(user)

    listed = await client.get("/api/v1/time-entries", headers=headers)
    assert [e["id"] for e in listed.json()] == [str(own.id)]

    hidden = await client.get(f"/api/v1/time-entries/{foreign.id}", headers=headers)
    assert hidden.status_code == 404


async def test_manager_cannot_edit_foreign_entry(client, factory, headers_for):
    manager = await factory.user(Role.MANAGER)
    project = await factory.active_project()
    entry = await factory.time_entry(await factory.user(Role.EMPLOYEE), project)

    response = await client.put(
        f"/api/v1/time-entries/{entry.id}", json={"description": "edited"}, headers=headers_for(manager)
    )

    assert response.status_code == 404


async def test_entry_on_ended_project_is_locked(client, factory, headers_for, today):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.ended_project()
    entry = await factory.time_entry(employee, project, on=today - timedelta(days=10))

    response = await client.delete(f"/api/v1/time-entries/{entry.id}", headers=headers_for(employee))

    assert response.status_code == 404


async def test_update_recomputes_duration(client, factory, headers_for):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()
    entry = await factory.time_entry(employee, project, duration=2.0)

    response = await client.put(
        f"/api/v1/time-entries/{entry.id}",
        json={"start_time": "08:00", "end_time": "12:15"},
        headers=headers_for(employee),
    )

    assert response.status_code == 200
    assert response.json()["duration"] == 4.25


@pytest.mark.parametrize(
    "hours, end_time",
    [(1.01, "10:01"), (2.33, "11:20"), (0.01, "09:01")],
)
async def test_manual_duration_is_kept_as_entered(client, factory, headers_for, today, hours, end_time):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()

    response = await client.post(
        "/api/v1/time-entries",
        json={"project_id": str(project.id), "date": today.isoformat(), "duration": hours},
        headers=headers_for(employee),
    )

    assert response.status_code == 201
    body = response.json()
    assert (body["start_time"], body["end_time"], body["duration"]) == ("09:00", end_time, hours)


async def test_update_with_manual_duration_keeps_hours(client, factory, headers_for):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()
    entry = await factory.time_entry(employee, project, duration=2.0)

    response = await client.put(
        f"/api/v1/time-entries/{entry.id}",
        json={"start_time": "13:00", "duration": 2.33},
        headers=headers_for(employee),
    )

    assert response.status_code == 200
    body = response.json()
    assert (body["start_time"], body["end_time"], body["duration"]) == ("13:00", "15:20", 2.33)


@pytest.mark.parametrize("field", ["date", "project_id"])
async def test_update_rejects_null_for_required_fields(client, factory, headers_for, field):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()
    entry = await factory.time_entry(employee, project, duration=2.0)

    response = await client.put(
        f"/api/v1/time-entries/{entry.id}",
        json={field: None},
        headers=headers_for(employee),
    )

    assert response.status_code == 422


async def test_selectable_tasks_exclude_archived_and_inactive(client, factory, headers_for):
    employee = await factory.user(Role.EMPLOYEE)
    active = await factory.active_project()
    ended = await factory.ended_project()
    open_task = await factory.task(active, "Open")
    await factory.task(active, "Archived", status="archived")
    await factory.task(ended, "Old")

    response = await client.get("/api/v1/tasks/selectable", headers=headers_for(employee))

    assert [t["id"] for t in response.json()] == [str(open_task.id)]
