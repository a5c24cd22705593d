"""Typed filters for delivery-assignment listings."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select

from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus


@dataclass(frozen=True)
class AssignmentCriteria:
    status: AssignmentStatus | None = None
    order_id: uuid.UUID | None = None
    farmer_id: uuid.UUID | None = None
    limit: int = 50
    offset: int = 0

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(DeliveryAssignment.status == self.status)
        if self.order_id is not None:
            query = query.where(DeliveryAssignment.order_id == self.order_id)
        if self.farmer_id is not None:
            query = query.where(DeliveryAssignment.farmer_id == self.farmer_id)
        return query


@dataclass(frozen=True)
class FarmerAssignmentCriteria:
    """A farmer's own assignments; ``upcoming_from`` keeps deliveries on or after that instant."""

    status: AssignmentStatus | None = None
    upcoming_from: datetime | None = None

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(DeliveryAssignment.status == self.status)
        if self.upcoming_from is not None:
            query = query.where(DeliveryAssignment.delivery_date >= self.upcoming_from)
        return query
