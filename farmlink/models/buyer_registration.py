"""Buyer registration: admin review record created at buyer sign-up."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.models.buyer import Buyer
from farmlink.models.enums import UserStatus


class BuyerRegistration(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "buyer_registrations"

    buyer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("buyers.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    status: Mapped[UserStatus] = mapped_column(nullable=False)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    admin_notes: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    buyer: Mapped[Buyer] = relationship("Buyer", lazy="joined", innerjoin=True)

    __table_args__ = (
        Index("ix_buyer_registrations_status", "status"),
    )
