import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.periods import RangeMode, parse_mode, preceding_range, resolve_period
from app.db.repositories.body_weight_repo import BodyWeightRepository
from app.schemas.analytics import (
    BodyWeightStatsResponse,
    BodyWeightSummaryResponse,
    BodyWeightSummaryTotals,
    BodyWeightTrend,
    BodyWeightTrendsResponse,
    DateRangeOut,
    UnitBreakdown,
    WeightEntrySnapshot,
)
from app.services.aggregation import (
    Reducer,
    aggregate,
    latest_buckets,
    normalize_granularity,
    percentage_change,
    round_or_none,
    round_or_zero,
    summarize,
)
from app.services.derived_metrics import round_half_up

logger = logging.getLogger(__name__)

# Body composition averages skip entries where the metric was not recorded
WEIGHT_REDUCERS = {
    "count": Reducer.count(),
    "avg_weight": Reducer.avg("weight"),
    "min_weight": Reducer.min("weight"),
    "max_weight": Reducer.max("weight"),
    "avg_body_fat": Reducer.avg("body_fat_percentage"),
    "avg_muscle_mass": Reducer.avg("muscle_mass"),
    "avg_bmi": Reducer.avg("bmi"),
}


class BodyWeightAnalyticsService:
    def __init__(self, db: AsyncSession, clock: Clock):
        self.repo = BodyWeightRepository(db)
        self.clock = clock

    async def get_summary(
        self,
        period: str = "monthly",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> BodyWeightSummaryResponse:
        """
        Weight summary for a period, with the average weight compared against
        the window of equal length before it.

        ``first``/``latest`` weights are taken by entry date, so the weight
        trend is always latest minus earliest within the period.
        """
        now = self.clock.now()
        current = resolve_period(
            period, now, start_date, end_date, parse_mode(mode, RangeMode.TO_DATE)
        )
        previous = preceding_range(current)

        records = await self.repo.find_in_range(previous.start, current.end)

        stats = summarize(
            records,
            {
                **WEIGHT_REDUCERS,
                "first_weight": Reducer.first("weight"),
                "latest_weight": Reducer.last("weight"),
            },
            date_range=current,
        )
        previous_stats = summarize(
            records,
            {"count": Reducer.count(), "avg_weight": Reducer.avg("weight")},
            date_range=previous,
        )

        first_weight = stats["first_weight"] or 0
        latest_weight = stats["latest_weight"] or 0

        return BodyWeightSummaryResponse(
            period=period,
            date_range=DateRangeOut(start_date=current.start, end_date=current.end),
            summary=BodyWeightSummaryTotals(
                total_entries=stats["count"],
                average_weight=round_or_zero(stats["avg_weight"]),
                min_weight=round_or_zero(stats["min_weight"]),
                max_weight=round_or_zero(stats["max_weight"]),
                first_weight=round_half_up(first_weight, 1),
                latest_weight=round_half_up(latest_weight, 1),
                weight_trend=round_half_up(latest_weight - first_weight, 1),
                average_body_fat=round_or_none(stats["avg_body_fat"]),
                average_muscle_mass=round_or_none(stats["avg_muscle_mass"]),
                average_bmi=round_or_none(stats["avg_bmi"]),
                previous_average_weight=round_or_zero(previous_stats["avg_weight"]),
                percentage_change=percentage_change(
                    stats["avg_weight"], previous_stats["avg_weight"]
                ),
            ),
        )

    async def get_trends(
        self,
        period: str = "monthly",
        limit: int = 12,
    ) -> BodyWeightTrendsResponse:
        """The most recent ``limit`` buckets over all entries, oldest first."""
        granularity = normalize_granularity(period)
        records = await self.repo.find_in_range()
        buckets = latest_buckets(records, WEIGHT_REDUCERS, granularity, limit=limit)

        return BodyWeightTrendsResponse(
            period=granularity,
            trends=[
                BodyWeightTrend(
                    period=b["key"],
                    label=b["label"],
                    average_weight=round_or_zero(b["avg_weight"]),
                    min_weight=round_or_zero(b["min_weight"]),
                    max_weight=round_or_zero(b["max_weight"]),
                    entry_count=b["count"],
                    average_body_fat=round_or_none(b["avg_body_fat"]),
                    average_muscle_mass=round_or_none(b["avg_muscle_mass"]),
                    average_bmi=round_or_none(b["avg_bmi"]),
                )
                for b in buckets
            ],
        )

    async def get_stats(self) -> BodyWeightStatsResponse:
        records = await self.repo.find_in_range()

        stats = summarize(
            records,
            {
                **WEIGHT_REDUCERS,
                "first": Reducer.first(lambda r: r),
                "latest": Reducer.last(lambda r: r),
            },
        )
        units = aggregate(
            records,
            {"count": Reducer.count(), "avg_weight": Reducer.avg("weight")},
            group_by="unit",
        )

        first, latest = stats["first"], stats["latest"]
        total_change = latest.weight - first.weight if first and latest else 0

        return BodyWeightStatsResponse(
            total_entries=stats["count"],
            average_weight=round_or_zero(stats["avg_weight"]),
            min_weight=round_or_zero(stats["min_weight"]),
            max_weight=round_or_zero(stats["max_weight"]),
            total_weight_change=round_half_up(total_change, 1),
            average_body_fat=round_or_none(stats["avg_body_fat"]),
            average_muscle_mass=round_or_none(stats["avg_muscle_mass"]),
            average_bmi=round_or_none(stats["avg_bmi"]),
            first_entry=WeightEntrySnapshot.model_validate(first) if first else None,
            latest_entry=WeightEntrySnapshot.model_validate(latest) if latest else None,
            unit_breakdown=[
                UnitBreakdown(
                    unit=u["key"],
                    count=u["count"],
                    average_weight=round_or_zero(u["avg_weight"]),
                )
                for u in units
            ],
        )
