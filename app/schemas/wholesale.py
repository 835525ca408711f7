from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from app.models.wholesale_batch import DEFAULT_PROFIT_PER_BOX
from app.schemas.validators import to_naive_utc, reject_explicit_nulls
from app.services import derived_metrics


class WholesaleBatchCreate(BaseModel):
    date: Optional[datetime] = None  # defaults to now
    investment_amount: float = Field(..., ge=0, allow_inf_nan=False)
    boxes_purchased: int = Field(..., ge=1, description="Must purchase at least 1 box")
    profit_per_box: float = Field(DEFAULT_PROFIT_PER_BOX, ge=0, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("notes", mode="before")
    @classmethod
    def strip_notes(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)


class WholesaleBatchUpdate(BaseModel):
    date: Optional[datetime] = None
    investment_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    boxes_purchased: Optional[int] = Field(None, ge=1, description="Must purchase at least 1 box")
    profit_per_box: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("notes", mode="before")
    @classmethod
    def strip_notes(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_required_not_null(self):
        reject_explicit_nulls(
            self, ("date", "investment_amount", "boxes_purchased", "profit_per_box")
        )
        return self


class WholesaleBatchResponse(BaseModel):
    """A stored batch plus the figures derived from it on read."""

    id: str
    date: datetime
    investment_amount: float
    boxes_purchased: int
    profit_per_box: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def cost_per_box(self) -> Optional[float]:
        return derived_metrics.cost_per_box(self.investment_amount, self.boxes_purchased)

    @computed_field
    @property
    def total_potential_profit(self) -> float:
        return derived_metrics.total_potential_profit(self.boxes_purchased, self.profit_per_box)

    @computed_field
    @property
    def profit_margin_percentage(self) -> Optional[str]:
        return derived_metrics.format_margin(
            derived_metrics.profit_margin(
                self.investment_amount, self.boxes_purchased, self.profit_per_box
            )
        )

    @computed_field
    @property
    def selling_price_per_box(self) -> Optional[float]:
        return derived_metrics.selling_price_per_box(
            self.investment_amount, self.boxes_purchased, self.profit_per_box
        )

    @computed_field
    @property
    def total_selling_value(self) -> Optional[float]:
        return derived_metrics.total_selling_value(
            self.investment_amount, self.boxes_purchased, self.profit_per_box
        )
