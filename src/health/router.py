"""Health check endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import ORJSONResponse
from redis.exceptions import RedisError

from src.config import get_settings
from src.core.database import ping_cassandra
from src.core.redis import get_redis


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - the process is up."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness() -> ORJSONResponse:
    """Readiness probe - Cassandra answers; Redis is reported but optional."""
    settings = get_settings()
    cassandra_ok = await ping_cassandra()

    redis_state = "disabled"
    client = get_redis()
    if client is not None:
        try:
            await client.ping()
            redis_state = "ok"
        except RedisError:
            redis_state = "unavailable"

    return ORJSONResponse(
        status_code=status.HTTP_200_OK
        if cassandra_ok
        else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if cassandra_ok else "not_ready",
            "environment": settings.environment,
            "cassandra": "ok" if cassandra_ok else "unavailable",
            "redis": redis_state,
        },
    )


@router.get("")
async def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
