import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, DateTime, Float, Boolean, Text, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.enums import Currency
from app.services.derived_metrics import round_half_up


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default=Currency.INR.value)
    payment_type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Recurrence
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurring_type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Owner reference, unused until authentication exists
    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_expenses_created_by_date", "created_by", "date"),
    )

    @validates("amount")
    def _round_amount(self, key, value):
        return round_half_up(value, 2) if value is not None else value
