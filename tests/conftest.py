from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from src.api.deps import get_document_store, get_identity_provider, get_redis
from src.api.main import app
from src.domain.services.role_resolver import RoleResolver
from src.domain.services.session_bootstrap import SessionBootstrap
from src.infrastructure.db.base import Base
from src.infrastructure.session_marker import LocalSignOutMarker

from tests.utils import (
    FakeDocumentStore,
    FakeIdentityProvider,
    FakeRedis,
    RecordingNavigator,
)


@pytest.fixture()
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture()
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture()
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture()
def marker() -> LocalSignOutMarker:
    return LocalSignOutMarker()


@pytest.fixture()
def resolver(store: FakeDocumentStore) -> RoleResolver:
    return RoleResolver(store, probe_timeout_seconds=1.0)


@pytest.fixture()
def bootstrap(
    provider: FakeIdentityProvider,
    resolver: RoleResolver,
    navigator: RecordingNavigator,
    marker: LocalSignOutMarker,
) -> SessionBootstrap:
    return SessionBootstrap(provider, resolver, navigator, marker)


@pytest.fixture()
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory over a throwaway SQLite database with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def empty_session_factory(
    tmp_path: Path,
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory over a SQLite database that has no tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}", future=True)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
async def async_client(
    store: FakeDocumentStore,
    provider: FakeIdentityProvider,
    fake_redis: FakeRedis,
) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app with in-memory stores.

    Each request gets its own provider instance sharing the accounts of ``provider``.
    """

    def request_provider() -> FakeIdentityProvider:
        scoped = FakeIdentityProvider()
        scoped.accounts = provider.accounts
        return scoped

    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = request_provider
    app.dependency_overrides[get_redis] = lambda: fake_redis

    transport = ASGITransport(app=app)  # type: ignore
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
