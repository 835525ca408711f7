"""Resolve named reporting periods into concrete date ranges.

Ranges are inclusive on both ends, matching how the record store filters
(``date >= start AND date <= end``). Two consecutive calendar ranges therefore
never overlap, but a range and its preceding window produced by
``preceding_range`` touch at the microsecond level only.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)

ONE_MICROSECOND = timedelta(microseconds=1)


class PeriodToken(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class RangeMode(str, Enum):
    # end = now, weekly is the trailing 7 days
    TO_DATE = "to_date"
    # full calendar unit, Sunday-start weeks
    CALENDAR = "calendar"


_TOKEN_ALIASES = {
    "daily": PeriodToken.DAILY,
    "day": PeriodToken.DAILY,
    "today": PeriodToken.DAILY,
    "weekly": PeriodToken.WEEKLY,
    "week": PeriodToken.WEEKLY,
    "monthly": PeriodToken.MONTHLY,
    "month": PeriodToken.MONTHLY,
    "yearly": PeriodToken.YEARLY,
    "year": PeriodToken.YEARLY,
    "custom": PeriodToken.CUSTOM,
}


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    @property
    def span(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def normalize_token(token: Optional[str]) -> Optional[PeriodToken]:
    """Map a user supplied period name to a PeriodToken, or None if unknown."""
    if not token:
        return None
    return _TOKEN_ALIASES.get(token.strip().lower())


def parse_mode(mode: Optional[str], default: RangeMode) -> RangeMode:
    if not mode:
        return default
    try:
        return RangeMode(mode.strip().lower())
    except ValueError:
        logger.debug(f"Unknown range mode {mode!r}, using {default.value}")
        return default


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Leniently parse an ISO-8601 date or datetime into naive UTC.

    Returns None for empty or unparsable input instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return start_of_day(moment) + timedelta(days=1) - ONE_MICROSECOND


def add_months(day: date, months: int) -> date:
    """Return the first day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def _month_bounds(now: datetime, mode: RangeMode) -> DateRange:
    start = datetime.combine(now.date().replace(day=1), time.min)
    if mode == RangeMode.TO_DATE:
        return DateRange(start, now)
    next_month = datetime.combine(add_months(now.date(), 1), time.min)
    return DateRange(start, next_month - ONE_MICROSECOND)


def resolve_period(
    token: Optional[str],
    now: datetime,
    custom_start: Union[str, date, datetime, None] = None,
    custom_end: Union[str, date, datetime, None] = None,
    mode: RangeMode = RangeMode.TO_DATE,
) -> DateRange:
    """Resolve a period token relative to ``now``.

    Unknown tokens, and ``custom`` without a usable start/end pair, fall back
    to the current month for the given mode. The result always has
    ``start <= end``.
    """
    period = normalize_token(token)

    if period == PeriodToken.DAILY:
        start = start_of_day(now)
        end = now if mode == RangeMode.TO_DATE else end_of_day(now)
        return DateRange(start, end)

    if period == PeriodToken.WEEKLY:
        if mode == RangeMode.TO_DATE:
            return DateRange(now - timedelta(days=7), now)
        # weekday() is Monday=0, so (weekday + 1) % 7 days back lands on Sunday
        sunday = start_of_day(now) - timedelta(days=(now.weekday() + 1) % 7)
        return DateRange(sunday, sunday + timedelta(days=7) - ONE_MICROSECOND)

    if period == PeriodToken.YEARLY:
        start = datetime(now.year, 1, 1)
        if mode == RangeMode.TO_DATE:
            return DateRange(start, now)
        return DateRange(start, datetime(now.year + 1, 1, 1) - ONE_MICROSECOND)

    if period == PeriodToken.CUSTOM:
        start = parse_datetime(custom_start)
        end = parse_datetime(custom_end)
        if start is not None and end is not None and start <= end:
            return DateRange(start, end)
        logger.info(
            f"Custom period without a valid range (start={custom_start!r}, "
            f"end={custom_end!r}), falling back to monthly"
        )

    return _month_bounds(now, mode)


def preceding_range(current: DateRange) -> DateRange:
    """Window of the same length ending just before ``current`` starts."""
    end = current.start - ONE_MICROSECOND
    return DateRange(end - current.span, end)
