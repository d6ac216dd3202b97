"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from shiftboard.adapters.db.redis.client import ping

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Report service status and whether Redis answers."""
    settings = request.app.state.settings
    redis_ok = await ping(request.app.state.redis)

    return JSONResponse(
        status_code=status.HTTP_200_OK if redis_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if redis_ok else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
            "environment": settings.app_env,
            "services": {"redis": "up" if redis_ok else "down"},
        },
    )
