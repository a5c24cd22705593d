"""Farmer performance: current derived score and tier (one row per farmer)."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.models.enums import PerformanceTier


class FarmerPerformance(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "farmer_performance"

    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    tier: Mapped[PerformanceTier] = mapped_column(nullable=False)
