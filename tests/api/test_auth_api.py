"""
API tests for login and the auth context endpoints.
"""

import pytest

from timetracker.core.rbac import Role

pytestmark = pytest.mark.asyncio

PASSWORD = "Sup3r-Secret!"


async def test_login_returns_token_pair(client, factory):
    user = await factory.user(Role.MANAGER, email="manager@example.com", password=PASSWORD)

    response = await client.post(
        "/api/v1/auth/login", json={"email": "Manager@Example.com", "password": PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == str(user.id)
    assert body["user"]["role"] == "manager"
    assert body["tokens"]["token_type"] == "bearer"


async def test_login_with_wrong_password(client, factory):
    await factory.user(email="someone@example.com", password=PASSWORD)

    response = await client.post(
        "/api/v1/auth/login", json={"email": "someone@example.com", "password": "nope"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"
    assert response.headers["www-authenticate"] == "Bearer"


async def test_login_for_inactive_user(client, factory):
    await factory.user(email="gone@example.com", password=PASSWORD, is_active=False)

    response = await client.post(
        "/api/v1/auth/login", json={"email": "gone@example.com", "password": PASSWORD}
    )

    assert response.status_code == 401


async def test_refresh_issues_new_tokens(client, factory):
    await factory.user(email="refresh@example.com", password=PASSWORD)
    login = await client.post(
        "/api/v1/auth/login", json={"email": "refresh@example.com", "password": PASSWORD}
    )
    refresh_token = login.json()["tokens"]["refresh_token"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})

    assert response.status_code == 200
    assert response.json()["access_token"]


async def test_me_requires_authentication(client):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_me_for_employee(client, factory, headers_for):
    user = await factory.user(Role.EMPLOYEE)

    response = await client.get("/api/v1/auth/me", headers=headers_for(user))

    assert response.status_code == 200
    auth = response.json()["auth"]
    assert auth["role"] == "employee"
    assert auth["role_display_name"] == "Employee"
    assert auth["predicates"]["isEmployee"] is True
    assert not any(auth["permissions"].values())
    assert not any(auth["controls"].values())
    assert [item["key"] for item in auth["navigation"]] == ["dashboard", "time_entry", "time_log"]
    assert auth["role_test"]["active"] is False


async def test_me_resolves_department_and_organization(client, factory, headers_for):
    user = await factory.user(Role.MANAGER)
    organization = await factory.organization()
    department = await factory.department(organization)
    employee = await factory.employee(department=department, user=user)

    response = await client.get("/api/v1/auth/me", headers=headers_for(user))

    auth = response.json()["auth"]
    assert auth["department_id"] == str(department.id)
    assert auth["organization_id"] == str(organization.id)
    assert auth["employee_id"] == str(employee.id)


async def test_unknown_stored_role_resolves_to_employee(client, factory, headers_for):
    user = await factory.user("superuser")

    response = await client.get("/api/v1/auth/current-role", headers=headers_for(user))

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "employee"
    assert not any(body["permissions"].values())


async def test_api_responses_are_not_cacheable(client, factory, headers_for):
    user = await factory.user(Role.ADMIN)

    response = await client.get("/api/v1/auth/current-role", headers=headers_for(user))

    assert response.headers["cache-control"] == "no-store"
    assert "Authorization" in response.headers["vary"]
