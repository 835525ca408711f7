import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, validate_record_id, build_pagination
from app.config import get_settings
from app.core.clock import Clock, get_clock
from app.core.exceptions import ResourceNotFoundError, RecordValidationError
from app.core.periods import parse_datetime
from app.db.repositories.expense_repo import ExpenseRepository
from app.models.enums import (
    ExpenseCategory,
    PaymentType,
    CATEGORY_LABELS,
    PAYMENT_TYPE_LABELS,
)
from app.schemas.analytics import (
    ExpenseStatsResponse,
    ExpenseSummaryResponse,
    ExpenseTrendsResponse,
    TopCategoriesResponse,
)
from app.schemas.common import (
    DataResponse,
    ListResponse,
    MessageDataResponse,
    MessageResponse,
    OptionItem,
)
from app.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseResponse
from app.schemas.validators import ensure_not_in_future, recurrence_error
from app.services.expense_analytics_service import ExpenseAnalyticsService

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()


# ============== Analytics ==============

@router.get("/analytics/summary", response_model=DataResponse[ExpenseSummaryResponse])
async def get_expense_summary(
    period: str = Query("month", description="Period: today, week, month, year, or custom"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Start of a custom period"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End of a custom period"),
    mode: Optional[str] = Query(None, description="Range mode: calendar (default) or to_date"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Get expense summary for the dashboard.

    Totals for the period with the percentage change against the preceding
    window of equal length, plus category, payment type and daily breakdowns.
    """
    logger.info(f"Expense summary request: period={period}, start={start_date}, end={end_date}")

    analytics = ExpenseAnalyticsService(db, clock)
    result = await analytics.get_summary(period, start_date, end_date, mode)

    logger.info(
        f"Expense summary result: period={period}, "
        f"total_transactions={result.summary.total_transactions}, "
        f"total_amount={result.summary.total_amount}"
    )

    return DataResponse(data=result)


@router.get("/analytics/trends", response_model=DataResponse[ExpenseTrendsResponse])
async def get_expense_trends(
    months: int = Query(12, ge=1, le=120, description="Number of calendar months to look back"),
    period: str = Query("monthly", description="Bucket size: daily, weekly, monthly, yearly"),
    limit: Optional[int] = Query(None, ge=1, le=366, description="Keep only the most recent buckets"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get bucketed expense totals, oldest first for chart display."""
    analytics = ExpenseAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_trends(months=months, period=period, limit=limit))


@router.get("/analytics/top-categories", response_model=DataResponse[TopCategoriesResponse])
async def get_top_categories(
    period: str = Query("month", description="Period: today, week, month, year"),
    limit: int = Query(10, ge=1, le=16),
    mode: Optional[str] = Query(None, description="Range mode: calendar (default) or to_date"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get the highest spending categories in a period."""
    analytics = ExpenseAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_top_categories(period=period, limit=limit, mode=mode))


@router.get("/analytics/stats", response_model=DataResponse[ExpenseStatsResponse])
async def get_expense_stats(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get overall expense statistics and insights."""
    analytics = ExpenseAnalyticsService(db, clock)
    return DataResponse(data=await analytics.get_stats())


# ============== Reference lists ==============

@router.get("/categories/list", response_model=DataResponse[List[OptionItem]])
async def list_categories():
    return DataResponse(
        data=[OptionItem(value=c.value, label=CATEGORY_LABELS[c]) for c in ExpenseCategory]
    )


@router.get("/payment-types/list", response_model=DataResponse[List[OptionItem]])
async def list_payment_types():
    return DataResponse(
        data=[OptionItem(value=p.value, label=PAYMENT_TYPE_LABELS[p]) for p in PaymentType]
    )


# ============== CRUD ==============

@router.get("", response_model=ListResponse[ExpenseResponse])
async def list_expenses(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    category: Optional[ExpenseCategory] = Query(None),
    payment_type: Optional[PaymentType] = Query(None, alias="paymentType"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None, description="Search title and description"),
    sort_by: str = Query("date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
):
    """
    List expenses with optional filters.

    Supports filtering by category, payment type, date range and a
    case-insensitive search. Results are paginated.
    """
    expense_repo = ExpenseRepository(db)

    conditions = expense_repo.filter_conditions(
        category=category.value if category else None,
        payment_type=payment_type.value if payment_type else None,
        start_date=parse_datetime(start_date),
        end_date=parse_datetime(end_date),
        search=search,
    )
    expenses, total = await expense_repo.paginate(
        conditions,
        page=page,
        page_size=limit,
        sort_by=_column_name(sort_by),
        sort_order=sort_order,
    )

    return ListResponse(
        data=[ExpenseResponse.model_validate(e) for e in expenses],
        pagination=build_pagination(page, limit, total),
    )


@router.get("/{expense_id}", response_model=DataResponse[ExpenseResponse])
async def get_expense(
    expense_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific expense by ID."""
    expense = await _get_or_404(ExpenseRepository(db), expense_id)
    return DataResponse(data=ExpenseResponse.model_validate(expense))


@router.post("", status_code=201, response_model=MessageDataResponse[ExpenseResponse])
async def create_expense(
    payload: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create a new expense."""
    fields = payload.model_dump()
    now = clock.now()
    ensure_not_in_future(fields["date"], now)
    if fields["date"] is None:
        fields["date"] = now

    expense = await ExpenseRepository(db).create(**_storable(fields))
    logger.info(f"Created expense {expense.id}: amount={expense.amount}, category={expense.category}")

    return MessageDataResponse(
        message="Expense created successfully",
        data=ExpenseResponse.model_validate(expense),
    )


@router.put("/{expense_id}", response_model=MessageDataResponse[ExpenseResponse])
async def update_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Update an expense. Only the provided fields change."""
    expense_repo = ExpenseRepository(db)
    expense = await _get_or_404(expense_repo, expense_id)

    fields = payload.model_dump(exclude_unset=True)
    ensure_not_in_future(fields.get("date"), clock.now())

    # Recurrence is validated against the merged record
    is_recurring = fields.get("is_recurring", expense.is_recurring)
    recurring_type = fields.get("recurring_type", expense.recurring_type)
    if "is_recurring" in fields and not is_recurring and "recurring_type" not in fields:
        fields["recurring_type"] = recurring_type = None
    error = recurrence_error(is_recurring, recurring_type)
    if error:
        raise RecordValidationError.for_field("recurringType", error)

    updated = await expense_repo.update(expense, _storable(fields))

    return MessageDataResponse(
        message="Expense updated successfully",
        data=ExpenseResponse.model_validate(updated),
    )


@router.delete("/{expense_id}", response_model=MessageResponse)
async def delete_expense(
    expense_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete an expense."""
    expense_repo = ExpenseRepository(db)
    expense = await _get_or_404(expense_repo, expense_id)
    await expense_repo.delete(expense)

    return MessageResponse(message="Expense deleted successfully")


async def _get_or_404(expense_repo: ExpenseRepository, expense_id: str):
    validate_record_id(expense_id, "expense")
    expense = await expense_repo.get_by_id(expense_id)
    if not expense:
        raise ResourceNotFoundError("Expense not found")
    return expense


def _storable(fields: dict) -> dict:
    """Enum members to their stored string values."""
    return {k: (v.value if hasattr(v, "value") else v) for k, v in fields.items()}


def _column_name(sort_by: str) -> str:
    # Accept camelCase sort keys from the frontend
    return {"paymentType": "payment_type", "createdAt": "created_at"}.get(sort_by, sort_by)
