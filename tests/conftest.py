"""
LawDesk - Test Configuration and Fixtures

Provides async database sessions, test clients, users and helpers
for all tests.
"""

import os
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment BEFORE importing app code
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DEBUG"] = "true"
os.environ["UPLOAD_DIR"] = str(Path(__file__).parent / "test_uploads")

from lawdesk.config import settings
from lawdesk.database import Base, get_db, enable_sqlite_foreign_keys
from lawdesk.main import app
from lawdesk.models import UserRole
from lawdesk.auth import create_user
from lawdesk.rate_limit import rate_limit_store
from lawdesk.sessions import MemorySessionStore


LAWYER_EMAIL = "lawyer@example.com"
LAWYER_PASSWORD = "LawyerPass123"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"


@pytest_asyncio.fixture
async def db():
    """Provide a test database session with fresh tables for each test."""
    # One shared in-memory connection, so every session sees the same tables
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await test_engine.dispose()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Point file storage at a per-test temporary directory."""
    upload_path = tmp_path / "uploads"
    upload_path.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", upload_path)
    return upload_path


def _http_client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def client(db):
    """Provide an async HTTP test client bound to the test database."""
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # The lifespan does not run under ASGITransport
    app.state.session_store = MemorySessionStore(settings.SESSION_EXPIRE_MINUTES * 60)
    rate_limit_store.reset()

    async with _http_client() as ac:
        yield ac

    app.dependency_overrides.clear()
    rate_limit_store.reset()


@pytest_asyncio.fixture
async def test_user(db):
    """Create an active lawyer in the database."""
    return await create_user(
        db,
        email=LAWYER_EMAIL,
        password=LAWYER_PASSWORD,
        full_name="Test Lawyer",
        username="lawyer",
        role=UserRole.LAWYER,
    )


@pytest_asyncio.fixture
async def admin_user(db):
    """Create an active administrator in the database."""
    return await create_user(
        db,
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        full_name="Office Admin",
        username="admin",
        role=UserRole.ADMIN,
    )


@pytest_asyncio.fixture
async def auth_client(client, test_user):
    """Provide an authenticated test client (logged in as test_user)."""
    await login(client, LAWYER_EMAIL, LAWYER_PASSWORD)
    return client


@pytest_asyncio.fixture
async def admin_client(client, admin_user):
    """A second client, logged in as admin_user, sharing the test database."""
    async with _http_client() as ac:
        await login(ac, ADMIN_EMAIL, ADMIN_PASSWORD)
        yield ac


# =============================================================================
# HELPERS
# =============================================================================

def keep_cookies(http: AsyncClient, response) -> None:
    """Copy cookies set by a response onto the client."""
    for name, value in response.cookies.items():
        http.cookies.set(name, value)


async def login(http: AsyncClient, email: str, password: str):
    response = await http.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    keep_cookies(http, response)
    return response


async def create_client_record(http: AsyncClient, **fields) -> dict:
    body = {"name": "Jane Doe", "email": "jane@example.com", "phone": "555-0100"}
    body.update(fields)
    response = await http.post("/api/clients", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def create_case_record(http: AsyncClient, client_id: str, lawyer_id: str, **fields) -> dict:
    body = {
        "caseNumber": "2024-CV-001",
        "title": "Doe v. Acme",
        "caseType": "civil",
        "clientId": client_id,
        "assignedLawyerId": lawyer_id,
    }
    body.update(fields)
    response = await http.post("/api/cases", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def create_task_record(http: AsyncClient, assigned_to_id: str, **fields) -> dict:
    body = {"title": "File motion", "assignedToId": assigned_to_id}
    body.update(fields)
    response = await http.post("/api/tasks", json=body)
    assert response.status_code == 201, response.text
    return response.json()
