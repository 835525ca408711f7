import logging
from datetime import datetime, time
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.periods import RangeMode, add_months, parse_mode, preceding_range, resolve_period
from app.db.repositories.wholesale_repo import WholesaleRepository
from app.schemas.analytics import (
    BatchSnapshot,
    DateRangeOut,
    ProfitTip,
    WholesaleStatsResponse,
    WholesaleSummaryResponse,
    WholesaleSummaryTotals,
    WholesaleTrend,
    WholesaleTrendsResponse,
)
from app.services.aggregation import (
    Reducer,
    latest_buckets,
    normalize_granularity,
    percentage_change,
    round_or_zero,
    summarize,
)
from app.services.derived_metrics import batch_cost_per_box, batch_potential_profit, round_half_up

logger = logging.getLogger(__name__)

TIPS_SAMPLE_SIZE = 10
LOW_MARGIN_THRESHOLD = 20
HIGH_MARGIN_THRESHOLD = 50
SMALL_BATCH_BOXES = 50
INVESTMENT_SPREAD_FACTOR = 3

GENERAL_TIPS = [
    ProfitTip(
        type="tip",
        title="Market Research",
        message="Regularly research market prices to ensure competitive profit margins.",
    ),
    ProfitTip(
        type="tip",
        title="Supplier Relations",
        message="Build strong relationships with suppliers for better pricing and payment terms.",
    ),
    ProfitTip(
        type="tip",
        title="Inventory Turnover",
        message="Track how quickly you sell inventory to optimize cash flow and reduce storage costs.",
    ),
]

BATCH_TOTALS = {
    "count": Reducer.count(),
    "total_investment": Reducer.sum("investment_amount"),
    "total_boxes": Reducer.sum("boxes_purchased"),
    "total_profit": Reducer.sum(batch_potential_profit),
}


class WholesaleAnalyticsService:
    def __init__(self, db: AsyncSession, clock: Clock):
        self.repo = WholesaleRepository(db)
        self.clock = clock

    async def get_summary(
        self,
        period: str = "monthly",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> WholesaleSummaryResponse:
        """
        Investment and profit summary for a period.

        Potential profit is summed per batch (boxes * profit per box) rather
        than derived from the totals. Total investment is compared with the
        window of equal length before the period.
        """
        now = self.clock.now()
        current = resolve_period(
            period, now, start_date, end_date, parse_mode(mode, RangeMode.TO_DATE)
        )
        previous = preceding_range(current)

        records = await self.repo.find_in_range(previous.start, current.end)

        totals = summarize(
            records,
            {
                **BATCH_TOTALS,
                "avg_investment": Reducer.avg("investment_amount"),
                "avg_profit_per_box": Reducer.avg("profit_per_box"),
                "max_investment": Reducer.max("investment_amount"),
                "min_investment": Reducer.min("investment_amount"),
            },
            date_range=current,
        )
        previous_totals = summarize(records, BATCH_TOTALS, date_range=previous)

        total_investment = totals["total_investment"]
        total_boxes = totals["total_boxes"]
        total_profit = totals["total_profit"]

        average_cost_per_box = total_investment / total_boxes if total_boxes > 0 else 0.0
        margin = total_profit / total_investment * 100 if total_investment > 0 else 0.0

        return WholesaleSummaryResponse(
            period=period,
            date_range=DateRangeOut(start_date=current.start, end_date=current.end),
            summary=WholesaleSummaryTotals(
                total_batches=totals["count"],
                total_investment=round_half_up(total_investment, 2),
                total_boxes=total_boxes,
                total_potential_profit=round_half_up(total_profit, 2),
                average_investment=round_or_zero(totals["avg_investment"], 2),
                average_profit_per_box=round_or_zero(totals["avg_profit_per_box"], 2),
                max_investment=round_or_zero(totals["max_investment"], 2),
                min_investment=round_or_zero(totals["min_investment"], 2),
                average_cost_per_box=round_half_up(average_cost_per_box, 2),
                profit_margin_percentage=round_half_up(margin, 2),
                total_selling_value=round_half_up(total_investment + total_profit, 2),
                previous_total_investment=round_half_up(previous_totals["total_investment"], 2),
                percentage_change=percentage_change(
                    total_investment, previous_totals["total_investment"]
                ),
            ),
        )

    async def get_trends(
        self,
        months: int = 6,
        period: str = "monthly",
        limit: Optional[int] = None,
    ) -> WholesaleTrendsResponse:
        """Bucketed batches since the first day of the month ``months`` ago."""
        now = self.clock.now()
        window_start = datetime.combine(add_months(now.date(), -months), time.min)
        granularity = normalize_granularity(period)

        records = await self.repo.find_in_range(window_start, None)
        buckets = latest_buckets(records, BATCH_TOTALS, granularity, limit=limit)

        return WholesaleTrendsResponse(
            period=granularity,
            trends=[
                WholesaleTrend(
                    period=b["key"],
                    label=b["label"],
                    total_investment=round_half_up(b["total_investment"], 2),
                    total_boxes=b["total_boxes"],
                    total_profit=round_half_up(b["total_profit"], 2),
                    batch_count=b["count"],
                )
                for b in buckets
            ],
        )

    async def get_stats(self) -> WholesaleStatsResponse:
        records = await self.repo.find_in_range()

        totals = summarize(
            records,
            {
                **BATCH_TOTALS,
                "max_investment": Reducer.max("investment_amount"),
                "min_investment": Reducer.min("investment_amount"),
                "first": Reducer.first(lambda r: r),
                "latest": Reducer.last(lambda r: r),
            },
        )

        count = totals["count"]
        total_investment = totals["total_investment"]
        total_profit = totals["total_profit"]
        first, latest = totals["first"], totals["latest"]

        return WholesaleStatsResponse(
            total_batches=count,
            total_investment=round_half_up(total_investment, 2),
            total_potential_profit=round_half_up(total_profit, 2),
            average_investment_per_batch=round_half_up(total_investment / count, 2) if count > 0 else 0.0,
            total_potential_return=round_half_up(total_investment + total_profit, 2),
            overall_profit_margin=(
                round_half_up(total_profit / total_investment * 100, 2) if total_investment > 0 else 0.0
            ),
            min_investment=round_or_zero(totals["min_investment"], 2),
            max_investment=round_or_zero(totals["max_investment"], 2),
            first_batch=BatchSnapshot.model_validate(first) if first else None,
            latest_batch=BatchSnapshot.model_validate(latest) if latest else None,
        )

    async def get_profit_tips(self) -> List[ProfitTip]:
        """
        Rule-based advice from the most recent batches.

        Margin, average batch size and investment spread are checked against
        fixed thresholds; the general tips are always appended.
        """
        batches = await self.repo.recent(TIPS_SAMPLE_SIZE)
        tips: List[ProfitTip] = []

        if batches:
            sample = len(batches)
            avg_profit_per_box = sum(b.profit_per_box for b in batches) / sample

            costs = [c for c in (batch_cost_per_box(b) for b in batches) if c is not None]
            avg_cost_per_box = sum(costs) / len(costs) if costs else 0

            if avg_cost_per_box > 0:
                margin = avg_profit_per_box / avg_cost_per_box * 100
                if margin < LOW_MARGIN_THRESHOLD:
                    tips.append(ProfitTip(
                        type="warning",
                        title="Low Profit Margin",
                        message=(
                            f"Current margin is {margin:.1f}%. Consider negotiating better "
                            "prices or finding higher-margin products."
                        ),
                    ))
                elif margin > HIGH_MARGIN_THRESHOLD:
                    tips.append(ProfitTip(
                        type="success",
                        title="Excellent Profit Margin",
                        message=(
                            f"Great margin of {margin:.1f}%! Consider scaling up this "
                            "profitable line."
                        ),
                    ))

            avg_boxes = sum(b.boxes_purchased for b in batches) / sample
            if avg_boxes < SMALL_BATCH_BOXES:
                tips.append(ProfitTip(
                    type="info",
                    title="Scale Up Opportunity",
                    message="Consider bulk purchasing to negotiate better rates and increase profit margins.",
                ))

            investments = [b.investment_amount for b in batches]
            if max(investments) > min(investments) * INVESTMENT_SPREAD_FACTOR:
                tips.append(ProfitTip(
                    type="info",
                    title="Investment Consistency",
                    message="Consider maintaining consistent investment amounts for better cash flow management.",
                ))

        tips.extend(GENERAL_TIPS)
        return tips
