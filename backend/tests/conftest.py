"""
ProductHub Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before any producthub import, then
       every test gets its own SQLite database (aiosqlite), its own upload
       directory and a fresh app whose DB dependency points at that database.

Fixture Hierarchy (all function-scoped):
    ├── db_engine / db_session_factory: per-test SQLite database
    ├── db_session: a session for service-level tests
    ├── temp_storage: upload directory wired into file_service
    ├── test_client: HTTPX AsyncClient over ASGITransport
    ├── sample_image_bytes / sample_png_bytes: minimal image payloads
    └── register_and_login: helper returning (user info, auth headers)
"""

import base64
import os
import tempfile

# Must run before producthub.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="producthub_db_"), "app.db"
)
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="producthub_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ALLOWED_EMAIL_DOMAINS"] = ""

from typing import AsyncGenerator, Dict, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

import producthub.models  # noqa: E402,F401
from producthub.database import Base, get_db_session  # noqa: E402
from producthub.main import create_app  # noqa: E402
from producthub.routes import health  # noqa: E402
from producthub.services.file_service import file_service  # noqa: E402

DEFAULT_PASSWORD = "rahasia123"


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A throwaway SQLite database with every table created from metadata."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(db_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for calling services directly."""
    async with db_session_factory() as session:
        yield session


@pytest.fixture
def temp_storage(tmp_path, monkeypatch):
    """
    Points the shared file_service at a per-test upload directory.

    Returns:
        The resolved storage directory (Path).
    """
    storage_dir = (tmp_path / "uploads").resolve()
    storage_dir.mkdir()
    monkeypatch.setattr(file_service, "storage_root", storage_dir)
    return storage_dir


@pytest.fixture
def sample_image_bytes():
    """Smallest JPEG the upload path accepts: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """A complete 1x1 RGBA PNG, so libmagic reports image/png."""
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
    )


@pytest_asyncio.fixture
async def test_client(db_engine, db_session_factory, temp_storage, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to a fresh app.

    get_db_session is overridden with the same commit/rollback contract as the
    real dependency, bound to the per-test database.
    The health route probes the same engine.
    """
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    monkeypatch.setattr(health, "engine", db_engine)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_and_login(test_client):
    """
    Factory: register a user, log in, return (credentials, auth headers).

    Usage:
        user, headers = await register_and_login("ana@gmail.com")
    """

    async def _register_and_login(
        email: str = "ana@gmail.com",
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Ana",
        last_name: str = "Putri",
    ) -> Tuple[Dict[str, str], Dict[str, str]]:
        response = await test_client.post(
            "/users/add",
            json={
                "email": email,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
            },
        )
        assert response.status_code == 200, response.text

        response = await test_client.post("/users/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        data = response.json()["data"]

        user = {"email": email, "password": password, "refresh_token": data["refreshToken"]}
        return user, {"Authorization": f"Bearer {data['token']}"}

    return _register_and_login
