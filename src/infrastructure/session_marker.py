"""Sign-out markers: set on explicit sign-out, consumed by the next load."""

from __future__ import annotations

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = structlog.get_logger()

KEY_PREFIX = "smartserve:signed_out:"


class LocalSignOutMarker:
    """Marker held in process memory for a single session."""

    def __init__(self, present: bool = False) -> None:
        self._present = present

    async def set(self) -> None:
        self._present = True

    async def consume(self) -> bool:
        present, self._present = self._present, False
        return present


class RedisSignOutMarker:
    """Marker stored under a per-session Redis key that expires on its own.

    An unreachable Redis reads as "no marker": the session is then resolved
    normally instead of failing the load.
    """

    def __init__(self, client: Redis, session_id: str, *, ttl_seconds: int) -> None:
        self.client = client
        self.key = f"{KEY_PREFIX}{session_id}"
        self.ttl_seconds = ttl_seconds

    async def set(self) -> None:
        try:
            await self.client.set(self.key, "1", ex=self.ttl_seconds)
        except RedisError as exc:
            await logger.awarning("signout_marker_set_failed", key=self.key, error=str(exc))
            return
        await logger.adebug("signout_marker_set", key=self.key, ttl_seconds=self.ttl_seconds)

    async def consume(self) -> bool:
        try:
            return await self.client.getdel(self.key) is not None
        except RedisError as exc:
            await logger.awarning("signout_marker_consume_failed", key=self.key, error=str(exc))
            return False
