import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, validate_record_id, build_pagination
from app.config import get_settings
from app.core.clock import Clock, get_clock
from app.core.exceptions import ResourceNotFoundError
from app.core.periods import parse_datetime
from app.db.repositories.wholesale_repo import WholesaleRepository
from app.schemas.analytics import (
    ProfitTip,
    WholesaleStatsResponse,
    WholesaleSummaryResponse,
    WholesaleTrendsResponse,
)
from app.schemas.common import DataResponse, ListResponse, MessageDataResponse, MessageResponse
from app.schemas.wholesale import (
    WholesaleBatchCreate,
    WholesaleBatchUpdate,
    WholesaleBatchResponse,
)
from app.services.wholesale_analytics_service import WholesaleAnalyticsService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()


# ============== Analytics ==============

@router.get("/analytics/summary", response_model=DataResponse[WholesaleSummaryResponse])
async def get_wholesale_summary(
    period: str = Query("monthly", description="Period: daily, weekly, monthly, yearly, or custom"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    mode: Optional[str] = Query(None, description="Range mode: to_date (default) or calendar"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get investment and potential profit totals for a period."""
    logger.info(f"Wholesale summary request: period={period}, start={start_date}, end={end_date}")

    analytics = WholesaleAnalyticsService(db, clock)
    result = await analytics.get_summary(period, start_date, end_date, mode)

    logger.info(
        f"Wholesale summary result: period={period}, "
        f"total_batches={result.summary.total_batches}, "
        f"total_investment={result.summary.total_investment}"
    )

    return DataResponse(data=result)


@router.get("/analytics/trends", response_model=DataResponse[WholesaleTrendsResponse])
async def get_wholesale_trends(
    months: int = Query(6, ge=1, le=120, description="Calendar months to look back"),
    period: str = Query("monthly", description="Bucket size: daily, weekly, monthly, yearly"),
    limit: Optional[int] = Query(None, ge=1, le=366, description="Keep only the most recent buckets"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    analytics = WholesaleAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_trends(months=months, period=period, limit=limit))


@router.get("/analytics/stats", response_model=DataResponse[WholesaleStatsResponse])
async def get_wholesale_stats(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get overall wholesale statistics across every batch."""
    analytics = WholesaleAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_stats())


@router.get("/analytics/tips", response_model=DataResponse[List[ProfitTip]])
async def get_profit_tips(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get profit tips based on the 10 most recent batches."""
    analytics = WholesaleAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_profit_tips())


# ============== CRUD ==============

@router.get("/recent", response_model=DataResponse[List[WholesaleBatchResponse]])
async def get_recent_wholesale(
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    batches = await WholesaleRepository(db).recent(limit)
    return DataResponse(data=[WholesaleBatchResponse.model_validate(b) for b in batches])


@router.get("", response_model=ListResponse[WholesaleBatchResponse])
async def list_wholesale(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    min_investment: Optional[float] = Query(None, alias="minInvestment", ge=0),
    max_investment: Optional[float] = Query(None, alias="maxInvestment", ge=0),
    sort_by: str = Query("date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
):
    """List wholesale batches with date and investment filters, newest first by default."""
    wholesale_repo = WholesaleRepository(db)

    conditions = wholesale_repo.filter_conditions(
        start_date=parse_datetime(start_date),
        end_date=parse_datetime(end_date),
        min_investment=min_investment,
        max_investment=max_investment,
    )
    batches, total = await wholesale_repo.paginate(
        conditions,
        page=page,
        page_size=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    return ListResponse(
        data=[WholesaleBatchResponse.model_validate(b) for b in batches],
        pagination=build_pagination(page, limit, total),
    )


@router.get("/{batch_id}", response_model=DataResponse[WholesaleBatchResponse])
async def get_wholesale(
    batch_id: str,
    db: AsyncSession = Depends(get_db),
):
    batch = await _get_or_404(WholesaleRepository(db), batch_id)
    return DataResponse(data=WholesaleBatchResponse.model_validate(batch))


@router.post("", status_code=201, response_model=MessageDataResponse[WholesaleBatchResponse])
async def create_wholesale(
    payload: WholesaleBatchCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create a wholesale batch. At least one box is required."""
    fields = payload.model_dump()
    if fields["date"] is None:
        fields["date"] = clock.now()

    batch = await WholesaleRepository(db).create(**fields)
    logger.info(
        f"Created wholesale batch {batch.id}: investment={batch.investment_amount}, "
        f"boxes={batch.boxes_purchased}"
    )

    return MessageDataResponse(
        message="Wholesale batch created successfully",
        data=WholesaleBatchResponse.model_validate(batch),
    )


@router.put("/{batch_id}", response_model=MessageDataResponse[WholesaleBatchResponse])
async def update_wholesale(
    batch_id: str,
    payload: WholesaleBatchUpdate,
    db: AsyncSession = Depends(get_db),
):
    wholesale_repo = WholesaleRepository(db)
    batch = await _get_or_404(wholesale_repo, batch_id)

    updated = await wholesale_repo.update(batch, payload.model_dump(exclude_unset=True))

    return MessageDataResponse(
        message="Wholesale batch updated successfully",
        data=WholesaleBatchResponse.model_validate(updated),
    )


@router.delete("/{batch_id}", response_model=MessageResponse)
async def delete_wholesale(
    batch_id: str,
    db: AsyncSession = Depends(get_db),
):
    wholesale_repo = WholesaleRepository(db)
    batch = await _get_or_404(wholesale_repo, batch_id)
    await wholesale_repo.delete(batch)

    return MessageResponse(message="Wholesale batch deleted successfully")


async def _get_or_404(wholesale_repo: WholesaleRepository, batch_id: str):
    validate_record_id(batch_id, "wholesale batch")
    batch = await wholesale_repo.get_by_id(batch_id)
    if not batch:
        raise ResourceNotFoundError("Wholesale batch not found")
    return batch
