"""Statistics service computing the search query dashboard snapshot."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from search_dashboard.database import store_operation
from search_dashboard.models.search_query import SearchQuery

RECENT_QUERIES_LIMIT = 10
UNKNOWN_SEARCH_TYPE = "Unknown"


async def get_total_count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(SearchQuery.id)))
    return result.scalar() or 0


async def get_search_type_breakdown(db: AsyncSession) -> dict[str, int]:
    """Count records per search type; records without a type are counted as "Unknown"."""
    result = await db.execute(
        select(SearchQuery.search_type, func.count(SearchQuery.id))
        .group_by(SearchQuery.search_type)
        .order_by(SearchQuery.search_type.asc().nulls_last())
    )
    breakdown: dict[str, int] = {}
    for search_type, count in result.fetchall():
        label = UNKNOWN_SEARCH_TYPE if search_type is None else search_type
        breakdown[label] = breakdown.get(label, 0) + count
    return breakdown


async def get_platform_breakdown(db: AsyncSession) -> dict[str, int]:
    """Count records per platform; records without a platform are left out entirely."""
    result = await db.execute(
        select(SearchQuery.platform_name, func.count(SearchQuery.id))
        .where(SearchQuery.platform_name.isnot(None))
        .group_by(SearchQuery.platform_name)
        .order_by(SearchQuery.platform_name)
    )
    return {row[0]: row[1] for row in result.fetchall()}


async def get_timeline(db: AsyncSession) -> dict[str, int]:
    """Daily record counts over the whole history, oldest day first."""
    day = func.date(SearchQuery.created_at)
    result = await db.execute(
        select(day.label("date"), func.count(SearchQuery.id))
        .where(SearchQuery.created_at.isnot(None))
        .group_by(day)
        .order_by(day)
    )
    return {str(row[0]): row[1] for row in result.fetchall()}


async def get_date_range(db: AsyncSession) -> dict:
    result = await db.execute(
        select(
            func.min(SearchQuery.created_at).label("earliest"),
            func.max(SearchQuery.created_at).label("latest"),
        )
    )
    row = result.one()
    return {"earliest": row.earliest, "latest": row.latest}


async def get_recent_queries(db: AsyncSession, limit: int = RECENT_QUERIES_LIMIT) -> list[dict]:
    result = await db.execute(
        select(
            SearchQuery.id,
            SearchQuery.keyword,
            SearchQuery.search_type,
            SearchQuery.platform_name,
            SearchQuery.created_at,
        )
        .order_by(SearchQuery.created_at.desc().nulls_last(), SearchQuery.id.desc())
        .limit(limit)
    )
    return [dict(row._mapping) for row in result.fetchall()]


async def compute_snapshot(db: AsyncSession) -> dict:
    """
    Compute the dashboard statistics from the search query table.

    Every call re-queries the store. The sub-queries share one session but
    not one snapshot transaction, so concurrent inserts can make ``total``
    differ slightly from the sum of a breakdown.

    Raises:
        StorageUnavailableError: If any query against the store fails.
    """
    with store_operation("total"):
        total = await get_total_count(db)
    with store_operation("search_type_breakdown"):
        search_type_breakdown = await get_search_type_breakdown(db)
    with store_operation("platform_breakdown"):
        platform_breakdown = await get_platform_breakdown(db)
    with store_operation("timeline"):
        timeline_data = await get_timeline(db)
    with store_operation("date_range"):
        date_range = await get_date_range(db)
    with store_operation("recent_queries"):
        recent_queries = await get_recent_queries(db)

    return {
        "total": total,
        "searchTypeBreakdown": search_type_breakdown,
        "platformBreakdown": platform_breakdown,
        "timelineData": timeline_data,
        "dateRange": date_range,
        "recentQueries": recent_queries,
    }
