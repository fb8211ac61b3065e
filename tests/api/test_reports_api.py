"""
API tests for project reports and CSV export.
"""

import csv
import io

import pytest

from timetracker.core.rbac import Role
from timetracker.services.report import CSV_COLUMNS

pytestmark = pytest.mark.asyncio


async def test_admin_exports_csv(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)
    project = await factory.active_project("Apollo")
    await factory.time_entry(await factory.user(Role.EMPLOYEE), project, duration=1.5)
    await factory.time_entry(await factory.user(Role.EMPLOYEE), project, duration=2.0)

    response = await client.get("/api/v1/reports/time-entries/export", headers=headers_for(admin))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == CSV_COLUMNS
    assert len(rows) == 3
    assert {row[4] for row in rows[1:]} == {"Apollo"}


@pytest.mark.parametrize("role", [Role.MANAGER, Role.PROJECT_MANAGER, Role.EMPLOYEE, Role.VIEWER])
async def test_export_requires_export_permission(client, factory, headers_for, role):
    caller = await factory.user(role)

    response = await client.get("/api/v1/reports/time-entries/export", headers=headers_for(caller))

    assert response.status_code == 404


async def test_export_requires_authentication(client):
    response = await client.get("/api/v1/reports/time-entries/export")

    assert response.status_code == 401


async def test_project_report_is_scoped_to_visible_entries(client, factory, headers_for):
    pm = await factory.user(Role.PROJECT_MANAGER)
    project = await factory.active_project()
    own = await factory.time_entry(pm, project, duration=1.0)
    await factory.time_entry(await factory.user(Role.EMPLOYEE), project, duration=3.0)

    response = await client.get(f"/api/v1/reports/project-time-entries/{project.id}", headers=headers_for(pm))

    assert response.status_code == 200
    body = response.json()
    assert [e["id"] for e in body["entries"]] == [str(own.id)]
    assert body["total_hours"] == 1.0


async def test_manager_report_covers_all_entries(client, factory, headers_for):
    manager = await factory.user(Role.MANAGER)
    project = await factory.active_project()
    await factory.time_entry(await factory.user(Role.EMPLOYEE), project, duration=1.0)
    await factory.time_entry(await factory.user(Role.EMPLOYEE), project, duration=3.0)

    body = (
        await client.get(f"/api/v1/reports/project-time-entries/{project.id}", headers=headers_for(manager))
    ).json()

    assert body["total_hours"] == 4.0


async def test_employee_cannot_view_reports(client, factory, headers_for):
    employee = await factory.user(Role.EMPLOYEE)
    project = await factory.active_project()

    response = await client.get(f"/api/v1/reports/project-time-entries/{project.id}", headers=headers_for(employee))

    assert response.status_code == 404


async def test_reversed_range_is_rejected(client, factory, headers_for):
    admin = await factory.user(Role.ADMIN)

    response = await client.get(
        "/api/v1/reports/time-entries/export",
        params={"start_date": "2025-02-01", "end_date": "2025-01-01"},
        headers=headers_for(admin),
    )

    assert response.status_code == 400
