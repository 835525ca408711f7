from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from app.core.exceptions import RecordValidationError
from app.core.periods import parse_datetime


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return parse_datetime(value)


def ensure_not_in_future(value: Optional[datetime], now: datetime) -> None:
    """Reject a record date later than the request clock's now."""
    if value is not None and value > now:
        raise RecordValidationError.for_field("date", "Date cannot be in the future")


def reject_explicit_nulls(model: BaseModel, fields: Iterable[str]) -> None:
    """Required columns may be omitted from a partial update but not nulled."""
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


def recurrence_error(is_recurring: Any, recurring_type: Any) -> Optional[str]:
    if is_recurring and not recurring_type:
        return "Recurring type is required for recurring expenses"
    if not is_recurring and recurring_type:
        return "Recurring type is only allowed for recurring expenses"
    return None
