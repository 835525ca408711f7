from datetime import datetime
from typing import Annotated, Optional, List

from pydantic import Field, StringConstraints, computed_field, field_validator, model_validator

from app.models.enums import Currency, PaymentType, ExpenseCategory, RecurringType
from app.schemas.common import CamelModel
from app.schemas.validators import to_naive_utc, reject_explicit_nulls, recurrence_error
from app.services.derived_metrics import formatted_amount, month_year

Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=30)]


class ExpenseCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    currency: Currency = Currency.INR
    payment_type: PaymentType
    category: ExpenseCategory
    date: Optional[datetime] = None  # defaults to now
    tags: List[Tag] = Field(default_factory=list)
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    notes: Optional[str] = Field(None, max_length=1000)
    created_by: Optional[str] = None

    @field_validator("title", "description", "notes", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_recurrence(self):
        error = recurrence_error(self.is_recurring, self.recurring_type)
        if error:
            raise ValueError(error)
        return self


class ExpenseUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[Currency] = None
    payment_type: Optional[PaymentType] = None
    category: Optional[ExpenseCategory] = None
    date: Optional[datetime] = None
    tags: Optional[List[Tag]] = None
    is_recurring: Optional[bool] = None
    recurring_type: Optional[RecurringType] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("title", "description", "notes", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_required_not_null(self):
        reject_explicit_nulls(
            self,
            ("title", "amount", "currency", "payment_type", "category", "date", "tags", "is_recurring"),
        )
        return self


class ExpenseResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    amount: float
    currency: str
    payment_type: str
    category: str
    date: datetime
    tags: List[str] = []
    is_recurring: bool
    recurring_type: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="formattedAmount")
    @property
    def formatted_amount(self) -> str:
        return formatted_amount(self.amount)

    @computed_field(alias="monthYear")
    @property
    def month_year(self) -> str:
        return month_year(self.date)
