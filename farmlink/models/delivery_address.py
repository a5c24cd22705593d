"""Delivery address: a buyer's drop-off location referenced by orders."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class DeliveryAddress(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "delivery_addresses"

    buyer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("buyers.id", ondelete="CASCADE"), nullable=False
    )
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    landmark: Mapped[str | None] = mapped_column(String(200))
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_delivery_addresses_buyer_id", "buyer_id"),
    )
