from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from src.api.deps import get_document_store, get_redis
from src.core.config import get_settings
from src.domain.ports import DocumentStore

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_document_store(store: DocumentStore) -> dict:
    """Check the role/catalog document store."""
    try:
        await store.ping()
        return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


async def check_redis(client: Redis) -> dict:
    """Check the Redis instance holding sign-out markers."""
    try:
        await client.ping()
        return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


@router.get("/health", summary="Service health probe")
async def health_check(
    store: DocumentStore = Depends(get_document_store),
    redis: Redis = Depends(get_redis),
) -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()

    store_status = await check_document_store(store)
    redis_status = await check_redis(redis)

    overall_status = "ok"
    if store_status.get("status") != "ok" or redis_status.get("status") != "ok":
        overall_status = "degraded"

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": overall_status,
        "timestamp": datetime.now(UTC).isoformat(),
        "backends": {
            "identity": settings.identity_backend,
            "documents": settings.document_backend,
        },
        "datastores": {
            "documents": store_status,
            "redis": redis_status,
        },
    }
    logger.info("health_probe", **payload)
    return payload
