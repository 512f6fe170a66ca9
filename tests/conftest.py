import os

# Must be set before the application modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from typing import AsyncGenerator, Dict
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers every table on Base.metadata
from main import app as fastapi_app
from app.auth.permissions import Actor
from app.core.database import get_async_session
from app.db.base import Base
from app.models.hr.employee import Employee
from app.models.shared.enums import Role

from tests.helpers import TEST_DATABASE_URL


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as db:
        yield db


@pytest.fixture
async def staff(session_maker) -> Dict[str, Actor]:
    """One actor per role, plus a second plain employee"""
    people = [
        ("employee", "Rahim Uddin", "rahim@example.com", Role.EMPLOYEE),
        ("colleague", "Karim Hasan", "karim@example.com", Role.EMPLOYEE),
        ("hr", "Nadia Islam", "nadia@example.com", Role.HR),
        ("executive", "Tanvir Ahmed", "tanvir@example.com", Role.EXECUTIVE),
        ("admin", "System Admin", "admin@example.com", Role.SYSTEM_ADMIN),
    ]
    actors = {}
    async with session_maker() as db:
        for key, name, email, role in people:
            employee = Employee(full_name=name, email=email, department="Operations", role=role, is_active=True)
            db.add(employee)
            await db.flush()
            actors[key] = Actor(employee_id=employee.id, role=role, email=email)
        await db.commit()
    return actors


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as db:
            yield db

    fastapi_app.dependency_overrides[get_async_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
