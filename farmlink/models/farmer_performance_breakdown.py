"""Per-component scores behind a farmer's current performance score."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class FarmerPerformanceBreakdown(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "farmer_performance_breakdown"

    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    on_time_delivery_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quantity_accuracy_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quality_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    availability_submission_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
