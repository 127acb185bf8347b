"""
Pytest configuration and shared fixtures.

Database tests run against a throwaway SQLite file per test, so no external
database is needed. Tests are plain functions that drive coroutines with
asyncio.run.
"""

import asyncio
import os
import tempfile
from typing import Optional
from uuid import UUID

# Point the default engine somewhere harmless before the app is imported
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{tempfile.gettempdir()}/taskboard-tests.db")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import httpx
import pytest
from sqlalchemy.pool import NullPool

from taskboard.core.permissions import Role
from taskboard.core.jwt import create_access_token
from taskboard.db.session import build_engine, build_session_maker, get_db, init_models
from taskboard.main import create_app
from taskboard.repositories.assignee_repository import AssigneeRepository
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.user import Actor


# Every seeded account uses this password
TEST_PASSWORD = "Secret-pass1"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: uses a temporary SQLite database")


@pytest.fixture
def engine(tmp_path):
    # NullPool: each asyncio.run gets fresh connections on its own loop
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'board.db'}", poolclass=NullPool)
    asyncio.run(init_models(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
def app(session_maker):
    app = create_app()

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    return app


def api_client(app) -> httpx.AsyncClient:
    """In-process client for the app (no server, no lifespan)."""
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


async def seed_user(
    session_maker,
    email: str,
    role: Role,
    assignee_name: Optional[str] = None,
    password: str = TEST_PASSWORD,
) -> Actor:
    """Insert a user (and optionally a linked assignee profile) and return it as an Actor."""
    async with session_maker() as db:
        assignee_id = None
        if assignee_name:
            assignee = await AssigneeRepository(db).create(name=assignee_name, department="Engineering")
            assignee_id = assignee.id
        user = await UserRepository(db).create(
            email=email,
            password=password,
            name=email.split("@")[0],
            role=role,
            assignee_id=assignee_id,
        )
        actor = Actor(id=user.id, role=user.role, assignee_id=assignee_id)
        await db.commit()
    return actor


async def seed_assignee(session_maker, name: str) -> UUID:
    async with session_maker() as db:
        assignee = await AssigneeRepository(db).create(name=name)
        assignee_id = assignee.id
        await db.commit()
    return assignee_id


def auth_headers(actor: Actor) -> dict:
    return {"Authorization": f"Bearer {create_access_token(actor.id)}"}
