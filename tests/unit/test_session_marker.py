from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from src.infrastructure.session_marker import (
    KEY_PREFIX,
    LocalSignOutMarker,
    RedisSignOutMarker,
)

from tests.utils import FakeRedis


class BrokenRedis:
    async def set(self, *args, **kwargs):
        raise RedisConnectionError("redis down")

    async def getdel(self, key: str):
        raise RedisConnectionError("redis down")


@pytest.mark.asyncio
async def test_local_marker_is_consumed_once() -> None:
    marker = LocalSignOutMarker()

    await marker.set()

    assert await marker.consume() is True
    assert await marker.consume() is False


@pytest.mark.asyncio
async def test_redis_marker_is_per_session_with_ttl() -> None:
    redis = FakeRedis()
    marker = RedisSignOutMarker(redis, "tab-1", ttl_seconds=30)  # type: ignore[arg-type]
    other = RedisSignOutMarker(redis, "tab-2", ttl_seconds=30)  # type: ignore[arg-type]

    await marker.set()

    assert redis.expiries[f"{KEY_PREFIX}tab-1"] == 30
    assert await other.consume() is False
    assert await marker.consume() is True
    assert await marker.consume() is False


@pytest.mark.asyncio
async def test_unreachable_redis_reads_as_no_marker() -> None:
    marker = RedisSignOutMarker(BrokenRedis(), "tab-1", ttl_seconds=30)  # type: ignore[arg-type]

    await marker.set()

    assert await marker.consume() is False
