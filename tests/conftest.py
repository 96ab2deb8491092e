"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - Database Fixtures: SQLAlchemy engine and session on in-memory SQLite
    - Storage Fixtures: Asset store rooted at a temporary directory
    - Service Fixtures: Lifecycle, queue and project services
    - Factory Fixtures: Accounts and admitted projects

Every test gets its own database and asset directory; nothing external is
needed.
"""

from __future__ import annotations

import io
import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from cleancut_service.features.accounts.models import Account
    from cleancut_service.features.projects.models import Project
    from cleancut_service.infra.storage import AssetStore

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JOB_SCHEDULER_ENABLED", "false")
os.environ.setdefault("JOB_WORKER_API_KEY", "test-worker-key")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("LOG_LEVEL", "WARNING")

WORKER_KEY = "test-worker-key"

# Noon on a Sunday; the plan windows used in tests never straddle midnight
FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(db_session: AsyncSession, asset_store: AssetStore):
    """FastAPI application wired to the per-test database and asset store.

    The lifespan is not run by ASGITransport, so no scheduler starts and the
    process-wide engine is never created.
    """
    from cleancut_service.app.main import create_app
    from cleancut_service.core.dependencies import get_db_session
    from cleancut_service.infra.storage import get_asset_store

    application = create_app()

    async def _session_override() -> AsyncGenerator[AsyncSession]:
        yield db_session

    application.dependency_overrides[get_db_session] = _session_override
    application.dependency_overrides[get_asset_store] = lambda: asset_store
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """HTTPX AsyncClient bound to the application.

    Example:
        async def test_health(client):
            response = await client.get("/api/v1/health")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def worker_headers() -> dict[str, str]:
    return {"X-Worker-Key": WORKER_KEY}


@pytest.fixture
def account_headers():
    """Build the identity header the upstream gateway forwards for an account."""

    def _headers(account: Account) -> dict[str, str]:
        return {"X-Account-ID": str(account.id)}

    return _headers


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with every table created.

    StaticPool keeps one connection so the database survives between sessions.
    """
    from cleancut_service.core.database import Base

    import cleancut_service.features.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session configured like the application's (no expiry on commit, no autoflush)."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
async def asset_store(tmp_path) -> AsyncGenerator[AssetStore]:
    """Asset store on the local backend under ``tmp_path``."""
    from cleancut_service.core.settings import StorageSettings
    from cleancut_service.infra.storage import AssetStore
    from cleancut_service.infra.storage.backends import LocalBackend

    root = tmp_path / "assets"
    settings = StorageSettings(backend="local", local_root=root)
    store = AssetStore(settings=settings, backend=LocalBackend(root))
    await store.startup()
    yield store
    await store.shutdown()


@pytest.fixture
def put_result(asset_store: AssetStore):
    """Write a result asset the way a worker would and return its reference."""

    async def _put(data: bytes = b"\x89PNG result", filename: str = "out.png") -> str:
        asset = await asset_store.store(io.BytesIO(data), "result", filename=filename)
        return asset.ref

    return _put


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed clock passed explicitly to time-dependent service calls."""
    return FIXED_NOW


@pytest.fixture
def job_settings():
    from cleancut_service.core.settings import JobSettings

    return JobSettings(worker_api_key=WORKER_KEY, scheduler_enabled=False)


@pytest.fixture
def lifecycle():
    from cleancut_service.features.projects.lifecycle import ProjectLifecycle

    return ProjectLifecycle()


@pytest.fixture
def queue_service(lifecycle, job_settings):
    from cleancut_service.features.queue.service import QueueService

    return QueueService(lifecycle, settings=job_settings)


@pytest.fixture
def project_service(lifecycle, queue_service, asset_store, job_settings):
    from cleancut_service.features.projects.service import ProjectService

    return ProjectService(
        lifecycle=lifecycle,
        queue=queue_service,
        asset_store=asset_store,
        job_settings=job_settings,
    )


@pytest.fixture
def sweeper_service(asset_store, job_settings):
    from cleancut_service.features.sweeper.service import SweeperService

    return SweeperService(asset_store=asset_store, settings=job_settings)


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def account_factory(db_session: AsyncSession):
    """Create and commit an account.

    Example:
        account = await account_factory(plan="premium", uploads_today=2)
    """
    from cleancut_service.features.accounts.service import AccountService

    async def _create(plan: str = "free", *, now: datetime | None = None, **fields: Any) -> Account:
        account = await AccountService().create(db_session, plan=plan, now=now)
        for key, value in fields.items():
            setattr(account, key, value)
        await db_session.commit()
        return account

    return _create


@pytest.fixture
def project_factory(db_session: AsyncSession, project_service, asset_store: AssetStore):
    """Store a source asset and admit it for an account, committing the result."""

    async def _create(
        account: Account,
        *,
        now: datetime = FIXED_NOW,
        kind: str = "image",
        filename: str = "photo.png",
        content_type: str = "image/png",
        data: bytes = b"\x89PNG source",
    ) -> Project:
        asset = await asset_store.store(io.BytesIO(data), kind, filename=filename)
        project = await project_service.admit(
            db_session,
            account.id,
            source_ref=asset.ref,
            kind=kind,
            size_bytes=asset.size_bytes,
            original_file_name=filename,
            content_type=content_type,
            now=now,
        )
        await db_session.commit()
        return project

    return _create
