import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


DEFAULT_PROFIT_PER_BOX = 20.0


class WholesaleBatch(Base):
    __tablename__ = "wholesale_batches"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    investment_amount: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    boxes_purchased: Mapped[int] = mapped_column(Integer, nullable=False)
    profit_per_box: Mapped[float] = mapped_column(
        Float, nullable=False, default=DEFAULT_PROFIT_PER_BOX
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )
