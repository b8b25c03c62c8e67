"""
Liveness and readiness probes.

/health answers as long as the process serves requests. /health/ready
reports the backing stores: the credential/session/audit database, and
Redis when rate limits are stored there. A degraded instance answers 503
so load balancers stop routing logins to it.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from workforce_auth.core.config import settings
from workforce_auth.core.database import check_database_connection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


async def check_redis_connection() -> bool | None:
    """Ping Redis. None means Redis is not configured."""
    if not settings.redis_url_str:
        return None
    client = Redis.from_url(settings.redis_url_str, socket_connect_timeout=2)
    try:
        return bool(await client.ping())
    except (RedisError, OSError) as e:
        logger.error("Redis readiness check failed: %s", e)
        return False
    finally:
        await client.aclose()


def _status(healthy: bool) -> str:
    return "ok" if healthy else "ko"


@router.get("")
async def liveness() -> dict[str, str]:
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness(request: Request) -> JSONResponse:
    db_healthy = await check_database_connection(
        getattr(request.app.state, "sessionmaker", None)
    )
    redis_healthy = await check_redis_connection()

    checks: dict[str, Any] = {"database": _status(db_healthy)}
    if redis_healthy is not None:
        checks["redis"] = _status(redis_healthy)

    ready = db_healthy and redis_healthy is not False
    if not ready:
        logger.warning("Readiness degraded: %s", checks)

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "degraded",
            "version": settings.version,
            "checks": checks,
        },
    )
