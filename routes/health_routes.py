"""
Health check endpoint.

GET /health — checks the link store and the Redis cache.
Rules:
- Store failure → "unhealthy" (503); redirects cannot be served without it.
- Redis failure or absence → "degraded" (200); the cache is optional.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dependencies import get_url_cache, get_url_repo
from infrastructure.cache.url_cache import UrlCache
from repositories.protocol import UrlRepository
from schemas.dto.responses.common import HealthResponse
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    url_repo: UrlRepository = Depends(get_url_repo),
    cache: UrlCache = Depends(get_url_cache),
) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        await url_repo.ping()
        checks["database"] = "ok"
    except Exception as e:
        log.error("health_database_error", error=str(e), error_type=type(e).__name__)
        checks["database"] = "error"
        overall = "unhealthy"

    if not cache.enabled:
        checks["redis"] = "not_configured"
        if overall == "healthy":
            overall = "degraded"
    else:
        try:
            await cache.ping()
            checks["redis"] = "ok"
        except Exception as e:
            log.warning("health_redis_error", error=str(e), error_type=type(e).__name__)
            checks["redis"] = "error"
            if overall == "healthy":
                overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(status=overall, checks=checks).model_dump(),
    )
