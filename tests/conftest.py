"""
Showcase Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite,
       StaticPool so all sessions share the one connection) and its own
       storage directory under tmp_path.

Fixture Hierarchy:
    ├── db_engine:       in-memory engine with all tables created
    ├── session_factory: async_sessionmaker bound to db_engine
    ├── db_session:      one AsyncSession for service-level tests
    ├── temp_storage / file_store: FileService rooted in tmp_path
    ├── png_bytes / jpeg_bytes: real images generated with Pillow
    ├── make_user:       coroutine factory that commits a user
    └── client:          httpx AsyncClient against a fresh app, wired to
                         the fixtures above
"""

import io
import os
import tempfile

# Must be set before any showcase import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="showcase_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ.pop("TOKEN_TTL_MINUTES", None)
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)
os.environ.pop("BOOTSTRAP_ADMIN_PASSWORD", None)

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from showcase.database import create_all, get_db_session  # noqa: E402
from showcase.services.file_service import FileService  # noqa: E402
from showcase.services.user_service import create_user  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret-admin"
USER_EMAIL = "user@example.com"
USER_PASSWORD = "secret-user"


def make_image_bytes(image_format: str = "PNG", size=(4, 4), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=image_format)
    return buf.getvalue()


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_all(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session_factory):
    """
    Usage:
        admin = await make_user("admin@example.com", "secret-admin", "admin")
    """

    async def _make(email: str, password: str, role: str = "user"):
        async with session_factory() as session:
            user = await create_user(session, email=email, password=password, role=role)
            await session.commit()
            return user

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def file_store(temp_storage):
    return FileService(storage_root=temp_storage)


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG", color=(30, 30, 200))


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(session_factory, db_engine, file_store, monkeypatch):
    """
    HTTPX AsyncClient talking to a fresh app instance.

    Each request gets its own session from `session_factory` that commits
    on success, like the production dependency. Item files land in
    `file_store`.
    """
    from showcase import database
    from showcase.main import create_app
    from showcase.routes import files as files_route
    from showcase.services.item_service import item_service

    monkeypatch.setattr(item_service, "_files", file_store)
    monkeypatch.setattr(files_route, "file_service", file_store)
    monkeypatch.setattr(database, "engine", db_engine)

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def login(client: AsyncClient, email: str, password: str) -> str:
    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest_asyncio.fixture
async def admin_token(client, make_user) -> str:
    await make_user(ADMIN_EMAIL, ADMIN_PASSWORD, "admin")
    return await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest_asyncio.fixture
async def user_token(client, make_user) -> str:
    await make_user(USER_EMAIL, USER_PASSWORD, "user")
    return await login(client, USER_EMAIL, USER_PASSWORD)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
