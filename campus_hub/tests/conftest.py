from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from campus_hub.config import Settings
from campus_hub.core.security import TokenService
from campus_hub.database import Database
from campus_hub.main import create_app
from campus_hub.models.enums import UserRole
from campus_hub.models.user import User

from .test_utils import create_user

TEST_SECRET_KEY = "test-secret-key-for-testing-only-min-32-chars"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        SECRET_KEY=TEST_SECRET_KEY,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        ENVIRONMENT="testing",
        DEBUG=True,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        RATE_LIMIT_ENABLED=False,
        SKIP_CONFIG_VALIDATION=True,
    )


@pytest_asyncio.fixture
async def app(test_settings: Settings) -> AsyncGenerator[FastAPI, None]:
    application = create_app(test_settings)
    await application.state.database.create_all()

    yield application

    await application.state.database.dispose()


@pytest_asyncio.fixture
async def database(app: FastAPI) -> Database:
    return app.state.database


@pytest_asyncio.fixture
async def token_service(app: FastAPI) -> TokenService:
    return app.state.token_service


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", timeout=30.0
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def student(database: Database) -> User:
    return await create_user(database, "student")


@pytest_asyncio.fixture
async def second_student(database: Database) -> User:
    return await create_user(database, "student2")


@pytest_asyncio.fixture
async def admin(database: Database) -> User:
    return await create_user(database, "admin", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def editor(database: Database) -> User:
    return await create_user(database, "editor", role=UserRole.EDITOR)


@pytest_asyncio.fixture
async def moderator(database: Database) -> User:
    return await create_user(database, "moderator", role=UserRole.MODERATOR)


@pytest_asyncio.fixture
async def manager(database: Database) -> User:
    return await create_user(database, "manager", role=UserRole.MANAGER)
