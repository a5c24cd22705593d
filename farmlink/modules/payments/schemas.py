"""Pydantic v2 schemas for payment recording and reconciliation."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from farmlink.models.enums import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    farmer_id: uuid.UUID
    delivery_assignment_id: uuid.UUID | None = None
    # Positivity is enforced by the service (INVALID_AMOUNT)
    amount_paid: Decimal = Field(..., max_digits=12, decimal_places=2)
    payment_method: PaymentMethod
    payment_date: datetime
    notes: str | None = Field(None, max_length=500)


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    farmer_id: uuid.UUID
    delivery_assignment_id: uuid.UUID | None = None
    amount_owed: Decimal
    amount_paid: Decimal
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    payment_date: datetime
    recorded_by: uuid.UUID | None = None
    notes: str | None = None
    created_at: datetime


class Balance(BaseModel):
    total_owed: Decimal
    total_paid: Decimal
    outstanding: Decimal
    delivered_assignments: int


class FarmerPayments(BaseModel):
    payments: list[PaymentResponse]
    balance: Balance


class ReportEntry(PaymentResponse):
    farmer_name: str


class ReportSummary(BaseModel):
    total_payments: int
    total_paid: Decimal
    total_owed: Decimal
    outstanding: Decimal


class PaymentReport(BaseModel):
    payments: list[ReportEntry]
    summary: ReportSummary
