"""Buyer model: demand-side business profile attached to a BUYER user."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.models.enums import BuyerType
from farmlink.models.user import User


class Buyer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "buyers"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    business_name: Mapped[str | None] = mapped_column(String(100))
    buyer_type: Mapped[BuyerType] = mapped_column(nullable=False)
    contact_person: Mapped[str] = mapped_column(String(100), nullable=False)
    estimated_volume: Mapped[int | None] = mapped_column(Integer)

    user: Mapped[User] = relationship("User", lazy="joined", innerjoin=True)

    __table_args__ = (
        Index("ix_buyers_buyer_type", "buyer_type"),
    )
