"""Append-only log of score/tier changes."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from farmlink.database.base import Base, UUIDPrimaryKeyMixin
from farmlink.models.enums import PerformanceTier


class FarmerPerformanceHistory(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "farmer_performance_history"

    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False
    )
    previous_score: Mapped[int] = mapped_column(Integer, nullable=False)
    new_score: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_tier: Mapped[PerformanceTier] = mapped_column(nullable=False)
    new_tier: Mapped[PerformanceTier] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    delivery_assignment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("delivery_assignments.id", ondelete="SET NULL")
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_farmer_performance_history_farmer_created", "farmer_id", "created_at"),
    )
