import logging
from datetime import datetime, time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.periods import (
    DateRange,
    RangeMode,
    add_months,
    parse_mode,
    preceding_range,
    resolve_period,
)
from app.db.repositories.expense_repo import ExpenseRepository
from app.schemas.analytics import (
    CategoryTotal,
    DailyExpense,
    DateRangeOut,
    ExpenseInsights,
    ExpenseMonthStats,
    ExpenseOverallStats,
    ExpenseStatsResponse,
    ExpenseSummaryResponse,
    ExpenseSummaryTotals,
    ExpenseTrend,
    ExpenseTrendsResponse,
    PaymentTypeTotal,
    TopCategoriesResponse,
)
from app.services.aggregation import (
    Reducer,
    aggregate,
    latest_buckets,
    normalize_granularity,
    percentage_change,
    round_or_zero,
    summarize,
)
from app.services.derived_metrics import round_half_up

logger = logging.getLogger(__name__)

TOTALS = {
    "total": Reducer.sum("amount"),
    "count": Reducer.count(),
    "average": Reducer.avg("amount"),
}


class ExpenseAnalyticsService:
    def __init__(self, db: AsyncSession, clock: Clock):
        self.repo = ExpenseRepository(db)
        self.clock = clock

    def _category_totals(self, records, date_range: Optional[DateRange] = None, limit: Optional[int] = None):
        buckets = aggregate(
            records,
            TOTALS,
            group_by="category",
            date_range=date_range,
            order_by="total",
            descending=True,
            limit=limit,
        )
        return [
            CategoryTotal(
                category=b["key"],
                total=round_half_up(b["total"], 2),
                count=b["count"],
                average_amount=round_or_zero(b["average"], 2),
            )
            for b in buckets
        ]

    async def get_summary(
        self,
        period: str = "month",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> ExpenseSummaryResponse:
        """
        Spending summary for a period compared with the window before it.

        Includes category and payment type breakdowns (sorted by total
        descending) and a day-by-day series for charts.
        """
        now = self.clock.now()
        current = resolve_period(
            period, now, start_date, end_date, parse_mode(mode, RangeMode.CALENDAR)
        )
        previous = preceding_range(current)

        # One read covering both windows; the engine splits them by range
        records = await self.repo.find_in_range(previous.start, current.end)

        totals = summarize(
            records,
            {**TOTALS, "min": Reducer.min("amount"), "max": Reducer.max("amount")},
            date_range=current,
        )
        previous_totals = summarize(records, TOTALS, date_range=previous)

        payment_types = aggregate(
            records,
            {"total": Reducer.sum("amount"), "count": Reducer.count()},
            group_by="payment_type",
            date_range=current,
            order_by="total",
            descending=True,
        )
        daily = aggregate(
            records,
            {"total": Reducer.sum("amount"), "count": Reducer.count()},
            group_by="day",
            date_range=current,
        )

        return ExpenseSummaryResponse(
            period=period,
            date_range=DateRangeOut(start_date=current.start, end_date=current.end),
            summary=ExpenseSummaryTotals(
                total_amount=round_half_up(totals["total"], 2),
                total_transactions=totals["count"],
                average_amount=round_or_zero(totals["average"], 2),
                min_amount=round_or_zero(totals["min"], 2),
                max_amount=round_or_zero(totals["max"], 2),
                previous_total_amount=round_half_up(previous_totals["total"], 2),
                percentage_change=percentage_change(totals["total"], previous_totals["total"]),
            ),
            category_breakdown=self._category_totals(records, current),
            payment_type_breakdown=[
                PaymentTypeTotal(
                    payment_type=b["key"],
                    total=round_half_up(b["total"], 2),
                    count=b["count"],
                )
                for b in payment_types
            ],
            daily_expenses=[
                DailyExpense(date=b["label"], total=round_half_up(b["total"], 2), count=b["count"])
                for b in daily
            ],
        )

    async def get_trends(
        self,
        months: int = 12,
        period: str = "monthly",
        limit: Optional[int] = None,
    ) -> ExpenseTrendsResponse:
        """
        Bucketed spending over the last ``months`` calendar months (the
        current month included), oldest bucket first.
        """
        now = self.clock.now()
        window_start = datetime.combine(add_months(now.date(), -(months - 1)), time.min)
        granularity = normalize_granularity(period)

        records = await self.repo.find_in_range(window_start, None)
        buckets = latest_buckets(records, TOTALS, granularity, limit=limit)

        return ExpenseTrendsResponse(
            period=granularity,
            trends=[
                ExpenseTrend(
                    period=b["key"],
                    label=b["label"],
                    total=round_half_up(b["total"], 2),
                    count=b["count"],
                    average=round_or_zero(b["average"], 2),
                )
                for b in buckets
            ],
        )

    async def get_top_categories(
        self,
        period: str = "month",
        limit: int = 10,
        mode: Optional[str] = None,
    ) -> TopCategoriesResponse:
        now = self.clock.now()
        current = resolve_period(period, now, mode=parse_mode(mode, RangeMode.CALENDAR))
        records = await self.repo.find_in_range(current.start, current.end)

        return TopCategoriesResponse(
            period=period,
            date_range=DateRangeOut(start_date=current.start, end_date=current.end),
            categories=self._category_totals(records, current, limit=limit),
        )

    async def get_stats(self) -> ExpenseStatsResponse:
        """Whole-collection statistics, this month's totals and spending insights."""
        records = await self.repo.find_in_range()
        this_month = resolve_period("month", self.clock.now(), mode=RangeMode.CALENDAR)

        overall = summarize(
            records,
            {
                **TOTALS,
                "min": Reducer.min("amount"),
                "max": Reducer.max("amount"),
                "first_date": Reducer.first("date"),
                "latest_date": Reducer.last("date"),
            },
        )
        month = summarize(records, TOTALS, date_range=this_month)

        payment_usage = aggregate(
            records,
            {"count": Reducer.count()},
            group_by="payment_type",
            order_by="count",
            descending=True,
            limit=1,
        )
        top_category = aggregate(
            records,
            {"total": Reducer.sum("amount")},
            group_by="category",
            order_by="total",
            descending=True,
            limit=1,
        )

        return ExpenseStatsResponse(
            overall=ExpenseOverallStats(
                total_expenses=overall["count"],
                total_amount=round_half_up(overall["total"], 2),
                average_amount=round_or_zero(overall["average"], 2),
                min_amount=round_or_zero(overall["min"], 2),
                max_amount=round_or_zero(overall["max"], 2),
                first_expense_date=overall["first_date"],
                latest_expense_date=overall["latest_date"],
            ),
            this_month=ExpenseMonthStats(
                total=round_half_up(month["total"], 2),
                count=month["count"],
                average=round_or_zero(month["average"], 2),
            ),
            insights=ExpenseInsights(
                most_used_payment_type=payment_usage[0]["key"] if payment_usage else "N/A",
                top_spending_category=top_category[0]["key"] if top_category else "N/A",
                top_category_amount=round_half_up(top_category[0]["total"], 2) if top_category else 0.0,
            ),
        )
