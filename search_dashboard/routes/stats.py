"""Statistics API consumed by the dashboard page."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from search_dashboard.auth import require_auth
from search_dashboard.config import settings
from search_dashboard.database import get_db
from search_dashboard.middleware.rate_limit import limiter
from search_dashboard.schemas.stats import StatsResponse
from search_dashboard.services import stats_service

router = APIRouter(prefix="/api", tags=["Statistics"])


@router.get("/stats", response_model=StatsResponse, dependencies=[Depends(require_auth)])
@limiter.limit(settings.rate_limit_api)
async def get_stats(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Aggregated search query statistics. Requires an authenticated session."""
    snapshot = await stats_service.compute_snapshot(db)
    return {
        "success": True,
        "data": snapshot,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
