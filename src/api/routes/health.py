from __future__ import annotations

from datetime import UTC, datetime

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter
from sqlalchemy import text
from src.core.config import get_settings
from src.infrastructure.db.session import get_session_factory

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_postgres() -> dict:
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        return {"status": "error", "message": str(exc)[:100]}
    return {"status": "ok"}


async def check_redis() -> dict:
    """Redis backs the RQ queue that runs rebalance jobs."""
    client = aioredis.from_url(get_settings().redis_url)
    try:
        await client.ping()
    except Exception as exc:
        return {"status": "error", "message": str(exc)[:100]}
    finally:
        await client.aclose()
    return {"status": "ok"}


@router.get("/health", summary="Service health probe")
async def health_check() -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()
    datastores = {
        "postgres": await check_postgres(),
        "redis": await check_redis(),
    }
    healthy = all(probe["status"] == "ok" for probe in datastores.values())

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if healthy else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": datastores,
    }
    logger.info("health_probe", **payload)
    return payload
