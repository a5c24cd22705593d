"""Pydantic v2 schemas for weekly availability."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AvailabilityCreate(BaseModel):
    product_type: str = Field(..., min_length=1, max_length=100)
    # Positivity is enforced by the service so it surfaces as INVALID_QUANTITY
    quantity_available: int
    avg_weight: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    ready_date: datetime
    photo_url: str | None = Field(None, max_length=500)


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    farmer_id: uuid.UUID
    week_start_date: datetime
    product_type: str
    quantity_available: int
    avg_weight: Decimal | None = None
    ready_date: datetime
    photo_url: str | None = None
    is_late: bool
    created_at: datetime


class CurrentWeekResponse(BaseModel):
    week_start_date: datetime
    week_end_date: datetime
    submission_window_open: bool
    submissions: list[AvailabilityResponse]
