"""Farmer model: supply-side profile attached to a FARMER user."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.models.user import User


class Farmer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "farmers"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    farm_name: Mapped[str | None] = mapped_column(String(100))
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    town: Mapped[str] = mapped_column(String(100), nullable=False)
    weekly_capacity_min: Mapped[int] = mapped_column(Integer, nullable=False)
    weekly_capacity_max: Mapped[int] = mapped_column(Integer, nullable=False)
    produce_category: Mapped[str] = mapped_column(String(50), nullable=False)
    feeding_method: Mapped[str | None] = mapped_column(String(100))

    # Verification
    verification_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    verification_admin_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )

    user: Mapped[User] = relationship(
        "User", foreign_keys=[user_id], lazy="joined", innerjoin=True
    )

    __table_args__ = (
        Index("ix_farmers_region", "region"),
        Index("ix_farmers_produce_category", "produce_category"),
    )
