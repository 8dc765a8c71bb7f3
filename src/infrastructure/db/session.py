from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from src.core.config import get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(url: str) -> dict[str, Any]:
    """Engine keyword arguments for ``url``; SQLite pools do not support pre-ping."""
    options: dict[str, Any] = {"echo": False, "future": True}
    if not url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return options


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily build the process-wide engine and session factory."""
    global _engine, _session_factory

    if _session_factory is None:
        url = get_settings().async_database_url
        _engine = create_async_engine(url, **engine_options(url))
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections; called on application shutdown."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
