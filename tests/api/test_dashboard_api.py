"""
API tests for dashboard aggregates.

Every aggregate must equal the sum over the entries the same caller can list.
"""

from datetime import timedelta

import pytest

from timetracker.core.rbac import Role

pytestmark = pytest.mark.asyncio


async def _seed(factory, today):
    project = await factory.active_project("Alpha")
    other_project = await factory.active_project("Beta")
    alice = await factory.user(Role.EMPLOYEE)
    bob = await factory.user(Role.PROJECT_MANAGER)
    await factory.time_entry(alice, project, duration=2.0)
    await factory.time_entry(alice, other_project, duration=1.5, on=today - timedelta(days=3))
    await factory.time_entry(bob, project, duration=4.0)
    await factory.time_entry(bob, project, duration=3.0, on=today - timedelta(days=20))
    return alice, bob


@pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER, None])
async def test_stats_match_visible_entries(client, factory, headers_for, today, role):
    alice, bob = await _seed(factory, today)
    caller = await factory.user(role) if role else alice
    headers = headers_for(caller)

    entries = (await client.get("/api/v1/time-entries", headers=headers)).json()
    stats = (await client.get("/api/v1/dashboard/stats", headers=headers)).json()

    assert stats["total_hours"] == round(sum(e["duration"] for e in entries), 2)
    assert stats["total_entries"] == len(entries)
    assert stats["today_hours"] == round(sum(e["duration"] for e in entries if e["date"] == today.isoformat()), 2)
    assert stats["total_projects"] == len({e["project_id"] for e in entries})


async def test_employee_stats_only_count_their_own_time(client, factory, headers_for, today):
    alice, _ = await _seed(factory, today)

    stats = (await client.get("/api/v1/dashboard/stats", headers=headers_for(alice))).json()

    assert stats["today_hours"] == 2.0
    assert stats["week_hours"] == 3.5
    assert stats["month_hours"] == 3.5
    assert stats["active_projects"] == 2


async def test_admin_week_and_month_windows(client, factory, headers_for, today):
    await _seed(factory, today)
    admin = await factory.user(Role.ADMIN)

    stats = (await client.get("/api/v1/dashboard/stats", headers=headers_for(admin))).json()

    assert stats["today_hours"] == 6.0
    assert stats["week_hours"] == 7.5
    assert stats["month_hours"] == 10.5


async def test_project_breakdown(client, factory, headers_for, today):
    await _seed(factory, today)
    admin = await factory.user(Role.ADMIN)

    breakdown = (await client.get("/api/v1/dashboard/project-breakdown", headers=headers_for(admin))).json()

    assert [(row["name"], row["hours"]) for row in breakdown] == [("Alpha", 9.0), ("Beta", 1.5)]
    assert sum(row["percentage"] for row in breakdown) == pytest.approx(100.0, abs=0.2)


async def test_recent_activity_is_scoped(client, factory, headers_for, today):
    alice, _ = await _seed(factory, today)

    activity = (await client.get("/api/v1/dashboard/recent-activity", headers=headers_for(alice))).json()

    assert len(activity) == 2
    assert {row["user_email"] for row in activity} == {alice.email}


async def test_department_hours(client, factory, headers_for, today):
    organization = await factory.organization()
    department = await factory.department(organization, "Engineering")
    user = await factory.user(Role.EMPLOYEE)
    await factory.employee(department=department, user=user)
    loner = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()
    await factory.time_entry(user, project, duration=2.0)
    await factory.time_entry(loner, project, duration=1.0)
    admin = await factory.user(Role.ADMIN)

    rows = (await client.get("/api/v1/dashboard/department-hours", headers=headers_for(admin))).json()

    assert {row["department"]: row["hours"] for row in rows} == {"Engineering": 2.0, "Unassigned": 1.0}


async def test_reversed_range_is_rejected(client, factory, headers_for, today):
    admin = await factory.user(Role.ADMIN)

    response = await client.get(
        "/api/v1/dashboard/stats",
        params={"start_date": today.isoformat(), "end_date": (today - timedelta(days=1)).isoformat()},
        headers=headers_for(admin),
    )

    assert response.status_code == 400
