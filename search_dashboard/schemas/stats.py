"""
Statistics Schemas

Pydantic models for the aggregated statistics returned by /api/stats.
Field names are part of the public contract consumed by the dashboard page.
Timestamps are serialized with an explicit UTC offset.
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _as_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class RecentQuery(BaseModel):
    """Projection of a search query record shown in the recent list"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    keyword: str | None = None
    search_type: str | None = None
    platform_name: str | None = None
    created_at: UtcDatetime | None = None


class DateRange(BaseModel):
    earliest: UtcDatetime | None = None
    latest: UtcDatetime | None = None


class StatsSnapshot(BaseModel):
    """One consistent read of the aggregated statistics"""

    total: int = Field(..., ge=0)
    searchTypeBreakdown: dict[str, int]
    platformBreakdown: dict[str, int]
    timelineData: dict[str, int]
    dateRange: DateRange
    recentQueries: list[RecentQuery]


class StatsResponse(BaseModel):
    success: bool = True
    data: StatsSnapshot
    timestamp: str
