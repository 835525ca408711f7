"""Grouping and reducer behaviour of the in-process aggregation engine."""
from datetime import datetime

from app.core.periods import DateRange
from app.services.aggregation import (
    Reducer,
    aggregate,
    latest_buckets,
    percentage_change,
    round_or_none,
    round_or_zero,
    summarize,
)


def rec(date, amount=None, **extra):
    return {"date": date, "amount": amount, **extra}


def test_summarize_empty_input_is_fully_populated():
    result = summarize(
        [],
        {
            "total": Reducer.sum("amount"),
            "count": Reducer.count(),
            "avg": Reducer.avg("amount"),
            "first": Reducer.first("amount"),
        },
    )
    assert result == {"total": 0, "count": 0, "avg": None, "first": None}


def test_aggregate_empty_input_has_no_buckets():
    assert aggregate([], {"count": Reducer.count()}, group_by="month") == []


def test_avg_min_max_skip_missing_values():
    records = [
        rec(datetime(2026, 10, 1), 10),
        rec(datetime(2026, 10, 2), None),
        rec(datetime(2026, 10, 3), 30),
    ]
    result = summarize(
        records,
        {
            "avg": Reducer.avg("amount"),
            "min": Reducer.min("amount"),
            "max": Reducer.max("amount"),
            "count": Reducer.count(),
            "sum": Reducer.sum("amount"),
        },
    )
    assert result == {"avg": 20, "min": 10, "max": 30, "count": 3, "sum": 40}


def test_first_and_last_follow_date_not_input_order():
    records = [
        rec(datetime(2026, 10, 5), 3),
        rec(datetime(2026, 10, 1), 1),
        rec(datetime(2026, 10, 3), 2),
    ]
    result = summarize(records, {"first": Reducer.first("amount"), "last": Reducer.last("amount")})
    assert result == {"first": 1, "last": 3}


def test_date_range_is_inclusive_on_both_ends():
    start, end = datetime(2026, 10, 1), datetime(2026, 10, 31)
    records = [
        rec(start, 1),
        rec(end, 2),
        rec(datetime(2026, 9, 30, 23, 59), 100),
        rec(datetime(2026, 11, 1), 100),
    ]
    result = summarize(records, {"sum": Reducer.sum("amount")}, date_range=DateRange(start, end))
    assert result["sum"] == 3


def test_week_buckets_use_iso_weeks():
    # 2027-01-01 (Friday) belongs to ISO week 53 of 2026
    records = [
        rec(datetime(2026, 12, 28), 1),
        rec(datetime(2027, 1, 1), 2),
        rec(datetime(2027, 1, 4), 4),
    ]
    buckets = aggregate(records, {"total": Reducer.sum("amount")}, group_by="weekly")

    assert [b["key"] for b in buckets] == [{"year": 2026, "week": 53}, {"year": 2027, "week": 1}]
    assert [b["label"] for b in buckets] == ["2026-W53", "2027-W01"]
    assert [b["total"] for b in buckets] == [3, 4]


def test_group_by_field_ordered_by_reducer_output():
    records = [
        rec(datetime(2026, 10, 1), 10, category="food"),
        rec(datetime(2026, 10, 2), 50, category="rent"),
        rec(datetime(2026, 10, 3), 15, category="food"),
    ]
    buckets = aggregate(
        records,
        {"total": Reducer.sum("amount")},
        group_by="category",
        order_by="total",
        descending=True,
    )
    assert [(b["key"], b["total"]) for b in buckets] == [("rent", 50), ("food", 25)]


def test_latest_buckets_keeps_most_recent_in_ascending_order():
    records = [rec(datetime(2026, month, 10), month) for month in range(6, 11)]

    buckets = latest_buckets(records, {"total": Reducer.sum("amount")}, "monthly", limit=3)

    assert [b["label"] for b in buckets] == ["2026-08", "2026-09", "2026-10"]
    assert [b["key"] for b in buckets][0] == {"year": 2026, "month": 8}


def test_callable_fields():
    records = [rec(datetime(2026, 10, 1), 2, qty=3), rec(datetime(2026, 10, 2), 5, qty=2)]
    result = summarize(records, {"value": Reducer.sum(lambda r: r["amount"] * r["qty"])})
    assert result["value"] == 16


def test_percentage_change_without_baseline_is_zero():
    assert percentage_change(150, 100) == 50.0
    assert percentage_change(50, 0) == 0.0
    assert percentage_change(50, None) == 0.0
    assert percentage_change(None, 100) == -100.0


def test_rounding_helpers_round_ties_up():
    assert round_or_zero(72.25) == 72.3
    assert round_or_zero(None) == 0.0
    assert round_or_none(0.125, 2) == 0.13
    assert round_or_none(None) is None
    # 1 / 8 * 100 lands on 12.5 exactly
    assert percentage_change(9, 8, digits=0) == 13.0
