import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, validate_record_id, build_pagination
from app.config import get_settings
from app.core.clock import Clock, get_clock
from app.core.exceptions import ResourceNotFoundError
from app.core.periods import parse_datetime
from app.db.repositories.body_weight_repo import BodyWeightRepository
from app.models.enums import WeightUnit
from app.schemas.analytics import (
    BodyWeightStatsResponse,
    BodyWeightSummaryResponse,
    BodyWeightTrendsResponse,
)
from app.schemas.body_weight import BodyWeightCreate, BodyWeightUpdate, BodyWeightResponse
from app.schemas.common import DataResponse, ListResponse, MessageDataResponse, MessageResponse
from app.schemas.validators import ensure_not_in_future
from app.services.body_weight_analytics_service import BodyWeightAnalyticsService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()

RECENT_DAYS = 7
RECENT_LIMIT = 10

SORT_ALIASES = {
    "bodyFatPercentage": "body_fat_percentage",
    "muscleMass": "muscle_mass",
    "createdAt": "created_at",
}


# ============== Analytics ==============

@router.get("/analytics/summary", response_model=DataResponse[BodyWeightSummaryResponse])
async def get_body_weight_summary(
    period: str = Query("monthly", description="Period: daily, weekly, monthly, yearly, or custom"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    mode: Optional[str] = Query(None, description="Range mode: to_date (default) or calendar"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Get body weight summary for a period.

    The percentage change compares the period's average weight with the
    preceding window of the same length.
    """
    logger.info(f"Body weight summary request: period={period}, start={start_date}, end={end_date}")

    analytics = BodyWeightAnalyticsService(db, clock)
    result = await analytics.get_summary(period, start_date, end_date, mode)

    logger.info(
        f"Body weight summary result: period={period}, "
        f"total_entries={result.summary.total_entries}, "
        f"average_weight={result.summary.average_weight}"
    )

    return DataResponse(data=result)


@router.get("/analytics/trends", response_model=DataResponse[BodyWeightTrendsResponse])
async def get_body_weight_trends(
    period: str = Query("monthly", description="Bucket size: daily, weekly, monthly, yearly"),
    limit: int = Query(12, ge=1, le=366, description="Maximum number of buckets to return"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Get body weight trends over time.

    Returns the most recent ``limit`` buckets that have entries, sorted
    oldest first for chart display.
    """
    analytics = BodyWeightAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_trends(period=period, limit=limit))


@router.get("/analytics/stats", response_model=DataResponse[BodyWeightStatsResponse])
async def get_body_weight_stats(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get all-time body weight statistics."""
    analytics = BodyWeightAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_stats())


# ============== CRUD ==============

@router.get("/recent", response_model=DataResponse[List[BodyWeightResponse]])
async def get_recent_body_weights(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Entries from the last 7 days, newest first."""
    since = clock.now() - timedelta(days=RECENT_DAYS)
    entries = await BodyWeightRepository(db).recent(RECENT_LIMIT, since=since)
    return DataResponse(data=[BodyWeightResponse.model_validate(e) for e in entries])


@router.get("", response_model=ListResponse[BodyWeightResponse])
async def list_body_weights(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    unit: Optional[WeightUnit] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    sort_by: str = Query("date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
):
    """List body weight entries with optional unit and date filters."""
    body_weight_repo = BodyWeightRepository(db)

    conditions = body_weight_repo.filter_conditions(
        start_date=parse_datetime(start_date),
        end_date=parse_datetime(end_date),
        unit=unit.value if unit else None,
    )
    entries, total = await body_weight_repo.paginate(
        conditions,
        page=page,
        page_size=limit,
        sort_by=SORT_ALIASES.get(sort_by, sort_by),
        sort_order=sort_order,
    )

    return ListResponse(
        data=[BodyWeightResponse.model_validate(e) for e in entries],
        pagination=build_pagination(page, limit, total),
    )


@router.get("/{entry_id}", response_model=DataResponse[BodyWeightResponse])
async def get_body_weight(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
):
    entry = await _get_or_404(BodyWeightRepository(db), entry_id)
    return DataResponse(data=BodyWeightResponse.model_validate(entry))


@router.post("", status_code=201, response_model=MessageDataResponse[BodyWeightResponse])
async def create_body_weight(
    payload: BodyWeightCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Record a body weight entry. Measurements are stored to one decimal."""
    fields = payload.model_dump()
    now = clock.now()
    ensure_not_in_future(fields["date"], now)
    if fields["date"] is None:
        fields["date"] = now
    fields["unit"] = fields["unit"].value

    entry = await BodyWeightRepository(db).create(**fields)
    logger.info(f"Created body weight entry {entry.id}: weight={entry.weight} {entry.unit}")

    return MessageDataResponse(
        message="Body weight entry created successfully",
        data=BodyWeightResponse.model_validate(entry),
    )


@router.put("/{entry_id}", response_model=MessageDataResponse[BodyWeightResponse])
async def update_body_weight(
    entry_id: str,
    payload: BodyWeightUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    body_weight_repo = BodyWeightRepository(db)
    entry = await _get_or_404(body_weight_repo, entry_id)

    fields = payload.model_dump(exclude_unset=True)
    ensure_not_in_future(fields.get("date"), clock.now())
    if fields.get("unit") is not None:
        fields["unit"] = fields["unit"].value

    updated = await body_weight_repo.update(entry, fields)

    return MessageDataResponse(
        message="Body weight entry updated successfully",
        data=BodyWeightResponse.model_validate(updated),
    )


@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete_body_weight(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
):
    body_weight_repo = BodyWeightRepository(db)
    entry = await _get_or_404(body_weight_repo, entry_id)
    await body_weight_repo.delete(entry)

    return MessageResponse(message="Body weight entry deleted successfully")


async def _get_or_404(body_weight_repo: BodyWeightRepository, entry_id: str):
    validate_record_id(entry_id, "body weight entry")
    entry = await body_weight_repo.get_by_id(entry_id)
    if not entry:
        raise ResourceNotFoundError("Body weight entry not found")
    return entry
