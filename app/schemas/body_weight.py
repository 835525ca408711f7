from datetime import datetime
from typing import Optional

from pydantic import Field, computed_field, field_validator, model_validator

from app.models.enums import WeightUnit
from app.schemas.common import CamelModel
from app.schemas.validators import to_naive_utc, reject_explicit_nulls
from app.services.derived_metrics import formatted_weight, month_year


class BodyWeightCreate(CamelModel):
    weight: float = Field(..., ge=1, le=1000, allow_inf_nan=False)
    unit: WeightUnit = WeightUnit.KG
    date: Optional[datetime] = None  # defaults to now
    notes: Optional[str] = Field(None, max_length=500)
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    muscle_mass: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    bmi: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    created_by: Optional[str] = None

    @field_validator("notes", mode="before")
    @classmethod
    def strip_notes(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return to_naive_utc(v)


class BodyWeightUpdate(CamelModel):
    weight: Optional[float] = Field(None, ge=1, le=1000, allow_inf_nan=False)
    unit: Optional[WeightUnit] = None
    date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100, allow_inf_nan=False)
    muscle_mass: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    bmi: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

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
        reject_explicit_nulls(self, ("weight", "unit", "date"))
        return self


class BodyWeightResponse(CamelModel):
    id: str
    weight: float
    unit: str
    date: datetime
    notes: Optional[str] = None
    body_fat_percentage: Optional[float] = None
    muscle_mass: Optional[float] = None
    bmi: Optional[float] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="formattedWeight")
    @property
    def formatted_weight(self) -> str:
        return formatted_weight(self.weight, self.unit)

    @computed_field(alias="monthYear")
    @property
    def month_year(self) -> str:
        return month_year(self.date)
