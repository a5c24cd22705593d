"""Delivery assignment: one farmer's committed share of an order."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from farmlink.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from farmlink.models.enums import AssignmentStatus, QualityResult


class DeliveryAssignment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "delivery_assignments"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("farmers.id", ondelete="CASCADE"), nullable=False
    )
    assigned_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    delivery_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    delivery_address_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("delivery_addresses.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[AssignmentStatus] = mapped_column(
        nullable=False, default=AssignmentStatus.PENDING, server_default="PENDING"
    )

    # Confirmation (written once)
    quantity_delivered: Mapped[int | None] = mapped_column(Integer)
    quality_result: Mapped[QualityResult | None] = mapped_column()
    confirmation_notes: Mapped[str | None] = mapped_column(Text)
    confirmed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("assigned_quantity > 0", name="ck_delivery_assignments_assigned_positive"),
        CheckConstraint(
            "quantity_delivered IS NULL OR quantity_delivered <= assigned_quantity",
            name="ck_delivery_assignments_delivered_le_assigned",
        ),
        Index("ix_delivery_assignments_order_id", "order_id"),
        Index("ix_delivery_assignments_farmer_status", "farmer_id", "status"),
    )
