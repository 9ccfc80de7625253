"""
Curriculum Manager - Test Configuration
Pytest fixtures and configuration for testing
"""
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from curriculum_manager.core.database import Base, get_db
from curriculum_manager.main import app
from curriculum_manager.schemas.curriculum import CurriculumData
from curriculum_manager.services.api_client import CurriculumApiClient
from curriculum_manager.services.local_store import JsonFileStorage, LocalCurriculumStore
from curriculum_manager.services.remote_store import RemoteCurriculumStore


# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)


# pysqlite transaction handling breaks SAVEPOINT unless BEGIN is emitted explicitly
@event.listens_for(test_engine.sync_engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(test_engine.sync_engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def storage(tmp_path) -> JsonFileStorage:
    """Key-value storage in a temporary file."""
    return JsonFileStorage(tmp_path / "store.json")


@pytest.fixture
def sample_tree_data() -> dict[str, Any]:
    """Small curriculum tree in its JSON (camelCase) form."""
    return {
        "curriculums": [
            {
                "id": "c1",
                "name": "Math",
                "description": "Primary math",
                "grades": [
                    {
                        "id": "g1",
                        "name": "Grade 1",
                        "duration": "2 Weeks",
                        "learningObjectives": ["Count to 100"],
                        "standardCodes": ["sc1"],
                        "books": [
                            {
                                "id": "b1",
                                "name": "Book 1",
                                "units": [
                                    {
                                        "id": "u1",
                                        "name": "Numbers",
                                        "totalTime": "3 Hours",
                                        "lessons": [
                                            {
                                                "id": "l1",
                                                "name": "Counting",
                                                "stages": [
                                                    {
                                                        "id": "s1",
                                                        "name": "Play",
                                                        "duration": "15 Minutes",
                                                        "activities": [
                                                            {
                                                                "id": "a1",
                                                                "name": "Number Song",
                                                                "type": "Song",
                                                                "duration": "5 Minutes",
                                                                "standardCodes": ["sc1", "missing"],
                                                            }
                                                        ],
                                                    }
                                                ],
                                            }
                                        ],
                                    }
                                ],
                            }
                        ],
                    }
                ],
                "standards": [
                    {
                        "id": "st1",
                        "name": "Number Sense",
                        "codes": [
                            {"id": "sc1", "code": "NS.1", "title": "Counting", "level": "K"},
                            {"id": "sc2", "code": "NS.2", "title": "Comparing", "level": "K"},
                        ],
                    }
                ],
                "activityTypes": [
                    {"id": "t1", "name": "Song", "color": "bg-pink-100 text-pink-800", "icon": "Music"}
                ],
            }
        ]
    }


@pytest.fixture
def sample_tree(sample_tree_data) -> CurriculumData:
    return CurriculumData.model_validate(sample_tree_data)


@pytest.fixture
def local_store(storage: JsonFileStorage, sample_tree: CurriculumData) -> LocalCurriculumStore:
    """Local store seeded with the sample tree."""
    return LocalCurriculumStore(storage=storage, initial_data=sample_tree)


@pytest_asyncio.fixture(scope="function")
async def remote_store(db_session: AsyncSession) -> AsyncGenerator[RemoteCurriculumStore, None]:
    """Remote store wired to the app in-process, with the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with CurriculumApiClient(
        base_url="http://test/api",
        transport=ASGITransport(app=app),
    ) as api_client:
        yield RemoteCurriculumStore(api_client)

    app.dependency_overrides.clear()
