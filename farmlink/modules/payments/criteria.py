"""Typed filters for the admin payment report."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select

from farmlink.models.enums import PaymentStatus
from farmlink.models.payment import Payment


@dataclass(frozen=True)
class PaymentReportCriteria:
    farmer_id: uuid.UUID | None = None
    status: PaymentStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    def apply(self, query: Select) -> Select:
        if self.farmer_id is not None:
            query = query.where(Payment.farmer_id == self.farmer_id)
        if self.status is not None:
            query = query.where(Payment.payment_status == self.status)
        if self.date_from is not None:
            query = query.where(Payment.payment_date >= self.date_from)
        if self.date_to is not None:
            query = query.where(Payment.payment_date <= self.date_to)
        return query
