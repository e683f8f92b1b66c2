"""
ScanPlant Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with the
       full schema, a temporary blob storage directory, and, for endpoint
       tests, an HTTPX AsyncClient wired to the FastAPI app with the session
       dependency pointed at that database.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:   in-memory engine with all tables created
    ├── db_session:  AsyncSession on db_engine
    ├── users:       alice, bob and an admin, provisioned as users rows
    ├── storage:     StorageService writing to a tmp directory
    ├── jpeg_bytes / png_bytes: real images generated with Pillow
    └── test_client: AsyncClient over ASGITransport
"""

import io
import os
import tempfile

# Settings are read at import time: point them at test resources first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="scanplant_test_")
os.environ["PUBLIC_BASE_URL"] = "http://test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from dataclasses import dataclass  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db_session  # noqa: E402
from app.models import comment, notification, plant, reminder, user  # noqa: E402,F401
from app.services.ownership import Caller  # noqa: E402
from app.services.storage_service import StorageService  # noqa: E402
from app.services.user_service import user_service  # noqa: E402


def make_image(fmt: str = "JPEG", size=(16, 16), color=(34, 139, 34)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@dataclass
class Users:
    alice: Caller
    bob: Caller
    admin: Caller


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def db_engine():
    """In-memory database shared by every connection of one test (StaticPool)."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(db_session) -> Users:
    """Three provisioned callers: two regular users and an admin."""
    alice = Caller(user_id="alice", username="Alice")
    bob = Caller(user_id="bob", username="Bob")
    admin = Caller(user_id="root", username="Root", is_admin=True)
    for caller in (alice, bob, admin):
        await user_service.ensure_user(db_session, caller)
    await db_session.commit()
    return Users(alice=alice, bob=bob, admin=admin)


# ══════════════════════════════════════════════════════════════════════════
# Blob storage and images
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def storage(tmp_path) -> StorageService:
    return StorageService(storage_root=str(tmp_path / "blobs"), public_base_url="http://test")


@pytest.fixture
def image_factory():
    """make_image(fmt, size, color) for tests that need a specific format."""
    return make_image


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return make_image("PNG")


# ══════════════════════════════════════════════════════════════════════════
# HTTP client
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def test_client(db_engine):
    """
    AsyncClient talking to the app in-process.

    get_db_session is overridden to use the test database while keeping the
    commit-on-success / rollback-on-error behaviour.
    """
    from app.main import app

    factory = async_sessionmaker(db_engine, expire_on_commit=False)

    async def override_get_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
