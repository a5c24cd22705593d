"""Weekly availability: a farmer's declared supply for one product in one week."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class WeeklyAvailability(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "weekly_availability"

    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False
    )
    week_start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    product_type: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False)
    avg_weight: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    ready_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    photo_url: Mapped[str | None] = mapped_column(String(500))
    is_late: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint(
            "farmer_id", "week_start_date", "product_type",
            name="uq_weekly_availability_farmer_week_product",
        ),
        Index("ix_weekly_availability_week_start_date", "week_start_date"),
    )
