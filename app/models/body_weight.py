import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Float, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.enums import WeightUnit
from app.services.derived_metrics import round_half_up


class BodyWeight(Base):
    __tablename__ = "body_weights"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )

    weight: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(3), nullable=False, default=WeightUnit.KG.value)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Optional body composition metrics; None means "not measured"
    body_fat_percentage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    muscle_mass: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    bmi: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_body_weights_created_by_date", "created_by", "date"),
    )

    @validates("weight", "body_fat_percentage", "muscle_mass", "bmi")
    def _round_one_decimal(self, key, value):
        return round_half_up(value, 1) if value is not None else value
