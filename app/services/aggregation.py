"""In-process grouping and reduction over time-stamped records.

Records are any objects (ORM rows, dicts) exposing their fields as attributes
or keys. ``aggregate`` filters them by an inclusive date range, groups them by
a calendar bucket or arbitrary key, and reduces each group with the requested
reducers:

    aggregate(
        expenses,
        date_range=DateRange(start, end),
        group_by="month",
        reducers={"total": Reducer.sum("amount"), "count": Reducer.count()},
    )

Reducer semantics over a group:
- ``sum`` / ``count``: 0 for an empty group; ``sum`` skips missing values.
- ``avg`` / ``min`` / ``max``: computed over present values only; None when
  no value is present.
- ``first`` / ``last``: value of the earliest / latest record by the date
  field (ties keep input order); None for an empty group.

Weeks are ISO-8601 weeks (Monday start, week 1 contains the first Thursday),
keyed by ISO year so the days around New Year stay in a single bucket.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from app.core.periods import DateRange
from app.services.derived_metrics import round_half_up

FieldRef = Union[str, Callable[[Any], Any], None]
GroupBy = Union[str, Callable[[Any], Any], None]

_GRANULARITY_ALIASES = {
    "daily": "day",
    "day": "day",
    "weekly": "week",
    "week": "week",
    "monthly": "month",
    "month": "month",
    "yearly": "year",
    "year": "year",
}


def get_value(record: Any, field: FieldRef) -> Any:
    """Read a field from a record, an ORM object or a mapping."""
    if field is None:
        return None
    if callable(field):
        return field(record)
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


@dataclass(frozen=True)
class Reducer:
    op: str
    field: FieldRef = None

    @classmethod
    def sum(cls, field: FieldRef) -> "Reducer":
        return cls("sum", field)

    @classmethod
    def avg(cls, field: FieldRef) -> "Reducer":
        return cls("avg", field)

    @classmethod
    def min(cls, field: FieldRef) -> "Reducer":
        return cls("min", field)

    @classmethod
    def max(cls, field: FieldRef) -> "Reducer":
        return cls("max", field)

    @classmethod
    def count(cls) -> "Reducer":
        return cls("count")

    @classmethod
    def first(cls, field: FieldRef) -> "Reducer":
        return cls("first", field)

    @classmethod
    def last(cls, field: FieldRef) -> "Reducer":
        return cls("last", field)

    def reduce(self, records: List[Any]) -> Any:
        """Reduce records already sorted by date ascending."""
        if self.op == "count":
            return len(records)

        if self.op in ("first", "last"):
            if not records:
                return None
            record = records[0] if self.op == "first" else records[-1]
            return get_value(record, self.field)

        values = [v for v in (get_value(r, self.field) for r in records) if v is not None]

        if self.op == "sum":
            return sum(values) if values else 0
        if not values:
            return None
        if self.op == "avg":
            return sum(values) / len(values)
        if self.op == "min":
            return min(values)
        if self.op == "max":
            return max(values)

        raise ValueError(f"Unknown reducer: {self.op}")


def normalize_granularity(period: Optional[str], default: str = "month") -> str:
    if not period:
        return default
    return _GRANULARITY_ALIASES.get(period.strip().lower(), default)


def calendar_key(moment: datetime, granularity: str) -> tuple:
    """Sortable bucket key for a timestamp."""
    if granularity == "day":
        return (moment.year, moment.month, moment.day)
    if granularity == "week":
        iso = moment.isocalendar()
        return (iso[0], iso[1])
    if granularity == "month":
        return (moment.year, moment.month)
    if granularity == "year":
        return (moment.year,)
    raise ValueError(f"Unknown granularity: {granularity}")


def key_as_dict(key: tuple, granularity: str) -> Dict[str, int]:
    names = {
        "day": ("year", "month", "day"),
        "week": ("year", "week"),
        "month": ("year", "month"),
        "year": ("year",),
    }[granularity]
    return dict(zip(names, key))


def key_label(key: tuple, granularity: str) -> str:
    """Human readable bucket label, e.g. 2026-10-19, 2026-W42, 2026-10, 2026."""
    if granularity == "day":
        return f"{key[0]}-{key[1]:02d}-{key[2]:02d}"
    if granularity == "week":
        return f"{key[0]}-W{key[1]:02d}"
    if granularity == "month":
        return f"{key[0]}-{key[1]:02d}"
    return str(key[0])


def filter_in_range(
    records: Iterable[Any],
    date_range: Optional[DateRange],
    date_field: str = "date",
) -> List[Any]:
    if date_range is None:
        return list(records)
    result = []
    for record in records:
        moment = get_value(record, date_field)
        if moment is not None and date_range.contains(moment):
            result.append(record)
    return result


def _sort_by_date(records: List[Any], date_field: str) -> List[Any]:
    # Records without a date sort first; sorted() is stable for ties
    return sorted(
        records,
        key=lambda r: (get_value(r, date_field) is not None, get_value(r, date_field) or datetime.min),
    )


def summarize(
    records: Iterable[Any],
    reducers: Dict[str, Reducer],
    date_field: str = "date",
    date_range: Optional[DateRange] = None,
) -> Dict[str, Any]:
    """Reduce all matching records to a single summary.

    Unlike ``aggregate``, an empty input still yields one fully populated
    summary (zero sums/counts, None for value reducers).
    """
    matching = _sort_by_date(filter_in_range(records, date_range, date_field), date_field)
    return {name: reducer.reduce(matching) for name, reducer in reducers.items()}


def aggregate(
    records: Iterable[Any],
    reducers: Dict[str, Reducer],
    group_by: GroupBy = None,
    date_field: str = "date",
    date_range: Optional[DateRange] = None,
    descending: bool = False,
    order_by: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Group matching records and reduce each group.

    Args:
        records: Input records.
        reducers: Output name -> Reducer.
        group_by: A calendar granularity ("day", "week", "month", "year" and
            their "daily"/"weekly"/... aliases), a field name, a callable
            returning the key, or None for a single group.
        date_field: Field holding the record timestamp.
        date_range: Inclusive [start, end] filter on ``date_field``.
        descending: Sort direction.
        order_by: Sort buckets by this reducer output instead of by key.
        limit: Keep at most this many buckets after sorting.

    Returns:
        A list of ``{"key": ..., <reducer outputs>}`` dicts. Calendar buckets
        additionally carry ``"label"`` and use a dict key such as
        ``{"year": 2026, "month": 10}``. No buckets for an empty input.
    """
    matching = _sort_by_date(filter_in_range(records, date_range, date_field), date_field)

    granularity = None
    if isinstance(group_by, str) and group_by.lower() in _GRANULARITY_ALIASES:
        granularity = normalize_granularity(group_by)

    groups: Dict[Any, List[Any]] = defaultdict(list)
    for record in matching:
        if granularity:
            key = calendar_key(get_value(record, date_field), granularity)
        elif group_by is None:
            key = None
        else:
            key = get_value(record, group_by)
        groups[key].append(record)

    buckets = []
    for key, group in groups.items():
        bucket = {"key": key}
        for name, reducer in reducers.items():
            bucket[name] = reducer.reduce(group)
        buckets.append(bucket)

    if order_by:
        buckets.sort(key=lambda b: (b[order_by] is not None, b[order_by] or 0), reverse=descending)
    else:
        buckets.sort(key=lambda b: (b["key"] is not None, b["key"] if b["key"] is not None else ""), reverse=descending)

    if limit is not None:
        buckets = buckets[:max(limit, 0)]

    if granularity:
        for bucket in buckets:
            bucket["label"] = key_label(bucket["key"], granularity)
            bucket["key"] = key_as_dict(bucket["key"], granularity)

    return buckets


def latest_buckets(
    records: Iterable[Any],
    reducers: Dict[str, Reducer],
    granularity: str,
    limit: Optional[int] = None,
    date_field: str = "date",
    date_range: Optional[DateRange] = None,
) -> List[Dict[str, Any]]:
    """Most recent ``limit`` calendar buckets, returned oldest first."""
    buckets = aggregate(
        records,
        reducers,
        group_by=granularity,
        date_field=date_field,
        date_range=date_range,
        descending=True,
        limit=limit,
    )
    buckets.reverse()
    return buckets


def round_or_none(value: Optional[float], digits: int = 1) -> Optional[float]:
    return round_half_up(value, digits) if value is not None else None


def round_or_zero(value: Optional[float], digits: int = 1) -> float:
    return round_half_up(value, digits) if value is not None else 0.0


def percentage_change(current: Optional[float], previous: Optional[float], digits: int = 2) -> float:
    """((current - previous) / previous) * 100, or 0 when there is no baseline."""
    if not previous or previous <= 0:
        return 0.0
    return round_half_up(((current or 0) - previous) / previous * 100, digits)
