"""Pydantic v2 schemas for the allocation engine."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from farmlink.models.enums import AssignmentStatus, PerformanceTier, UserStatus
from farmlink.modules.orders.schemas import OrderResponse


class AllocationRow(BaseModel):
    farmer_id: uuid.UUID
    # Positivity is enforced by the engine so it surfaces as INVALID_QUANTITY
    assigned_quantity: int


class AllocationCreate(BaseModel):
    order_id: uuid.UUID
    assignments: list[AllocationRow] = Field(..., min_length=1)


class AssignmentUpdate(BaseModel):
    assigned_quantity: int


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    farmer_id: uuid.UUID
    assigned_quantity: int
    delivery_date: datetime
    delivery_address_id: uuid.UUID
    status: AssignmentStatus
    created_at: datetime


class AllocationResult(BaseModel):
    assignments: list[AssignmentResponse]
    total_assigned: int
    remaining_quantity: int


class OrderAllocationView(OrderResponse):
    assignments: list[AssignmentResponse] = []
    total_assigned: int = 0
    remaining_quantity: int = 0


class AvailabilitySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_type: str
    quantity_available: int
    avg_weight: Decimal | None = None
    ready_date: datetime
    is_late: bool


class FarmerAllocationView(BaseModel):
    id: uuid.UUID
    full_name: str
    farm_name: str | None = None
    region: str
    town: str
    produce_category: str
    weekly_capacity_min: int
    weekly_capacity_max: int
    status: UserStatus
    score: int | None = None
    tier: PerformanceTier | None = None
    availability: list[AvailabilitySummary] = []


class AllocationOverview(BaseModel):
    current_week_start: datetime
    orders: list[OrderAllocationView]
    farmers: list[FarmerAllocationView]
