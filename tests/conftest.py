"""
Shared fixtures for the TimeTracker test suite.

Every test gets its own in-memory SQLite database; the application's get_db
dependency is overridden to use it.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "timetracker-test-secret-key-with-enough-length")
os.environ.setdefault("ROLE_TESTING_ENABLED", "true")

from datetime import date, timedelta
from typing import Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from timetracker.core.database import Base, get_db
from timetracker.core.rbac import Role
from timetracker.core.security import create_access_token, get_password_hash
from timetracker.core.timekeeping import today as app_today
from timetracker.main import app
from timetracker.models import (
    Department,
    Employee,
    Organization,
    Project,
    Task,
    TimeEntry,
    User,
)

TEST_PASSWORD = "Sup3r-Secret!"


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def today():
    return app_today()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def headers_for():
    return auth_headers


class Factory:
    """Creates committed rows directly, bypassing the guarded repositories"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def user(
        self,
        role: Role = Role.EMPLOYEE,
        *,
        email: Optional[str] = None,
        password: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        role_value = role.value if isinstance(role, Role) else role
        return await self._add(
            User(
                email=email or f"{role_value.replace('_', '-')}-{uuid4().hex[:8]}@example.com",
                first_name="Test",
                last_name=str(role_value).title(),
                role=role_value,
                hashed_password=get_password_hash(password) if password else None,
                is_active=is_active,
            )
        )

    async def organization(self, name: str = "Acme") -> Organization:
        return await self._add(Organization(name=name))

    async def department(self, organization: Organization, name: str = "Engineering") -> Department:
        return await self._add(Department(name=name, organization_id=organization.id))

    async def employee(
        self,
        *,
        department: Optional[Department] = None,
        user: Optional[User] = None,
        department_value: Optional[str] = None,
    ) -> Employee:
        number = uuid4().hex[:8]
        return await self._add(
            Employee(
                employee_number=f"E-{number}",
                first_name="Emp",
                last_name=number,
                email=f"emp-{number}@example.com",
                department=department_value or (str(department.id) if department else "unassigned"),
                position="Engineer",
                hire_date=date(2023, 1, 2),
                user_id=user.id if user else None,
            )
        )

    async def project(
        self,
        name: str = "Project",
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        owner: Optional[User] = None,
    ) -> Project:
        return await self._add(
            Project(
                name=name,
                start_date=start_date,
                end_date=end_date,
                user_id=owner.id if owner else None,
            )
        )

    async def active_project(self, name: str = "Active project", **kwargs) -> Project:
        on = app_today()
        return await self.project(name, start_date=on - timedelta(days=30), end_date=on + timedelta(days=30), **kwargs)

    async def ended_project(self, name: str = "Ended project", **kwargs) -> Project:
        on = app_today()
        return await self.project(name, start_date=on - timedelta(days=60), end_date=on - timedelta(days=1), **kwargs)

    async def task(self, project: Project, name: str = "Task", status: str = "active") -> Task:
        return await self._add(Task(project_id=project.id, name=name, status=status))

    async def time_entry(
        self,
        user: User,
        project: Project,
        *,
        duration: float = 2.0,
        on: Optional[date] = None,
        task: Optional[Task] = None,
    ) -> TimeEntry:
        end_hour = 9 + int(duration)
        end_minutes = int(round((duration - int(duration)) * 60))
        return await self._add(
            TimeEntry(
                user_id=user.id,
                project_id=project.id,
                task_id=task.id if task else None,
                date=on or app_today(),
                start_time="09:00",
                end_time=f"{end_hour:02d}:{end_minutes:02d}",
                duration=duration,
            )
        )


@pytest_asyncio.fixture
async def factory(db):
    return Factory(db)
