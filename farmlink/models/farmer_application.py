"""Farmer application: admin review record created at farmer registration."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.models.enums import UserStatus
from farmlink.models.farmer import Farmer


class FarmerApplication(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "farmer_applications"

    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    status: Mapped[UserStatus] = mapped_column(nullable=False)
    terms_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    terms_accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Review
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    admin_notes: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    farmer: Mapped[Farmer] = relationship("Farmer", lazy="joined", innerjoin=True)

    __table_args__ = (
        Index("ix_farmer_applications_status", "status"),
    )
