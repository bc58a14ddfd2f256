"""
Monitoring Routes

Health, readiness and liveness probes for load balancers and orchestrators.
"""

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from search_dashboard.config import settings
from search_dashboard.database import check_database

router = APIRouter(tags=["Monitoring"])

# Application start time for uptime calculation
APP_START_TIME = time.time()


class HealthStatus(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    version: str
    environment: str
    uptime_seconds: float
    database: dict[str, Any]


class ReadinessStatus(BaseModel):
    ready: bool
    reason: str | None = None


@router.get("/health", response_model=HealthStatus)
async def health_check():
    """
    Health endpoint including database connectivity.

    Answers 503 with status "degraded" when the database is unreachable.
    """
    database = await check_database()
    health = HealthStatus(
        status="ok" if database["status"] == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        environment=settings.environment,
        uptime_seconds=round(time.time() - APP_START_TIME, 2),
        database=database,
    )
    status_code = status.HTTP_200_OK if health.status == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=health.model_dump())


@router.get("/ready", response_model=ReadinessStatus)
async def readiness_check():
    """Readiness probe: traffic should only be routed here when the database answers."""
    database = await check_database()
    if database["status"] == "healthy":
        return ReadinessStatus(ready=True)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ReadinessStatus(ready=False, reason=database["message"]).model_dump(),
    )


@router.get("/live")
async def liveness_check() -> dict[str, bool]:
    """Liveness probe; does not touch external services."""
    return {"alive": True}
