"""Pydantic v2 schemas for buyer orders and admin order gating."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from farmlink.models.enums import AssignmentStatus, OrderStatus, OrderType, QualityResult, UserStatus
from farmlink.modules.buyer.schemas import DeliveryAddressResponse


class OrderCreate(BaseModel):
    product_type: str = Field(..., min_length=1, max_length=100)
    # Positivity and future date are enforced by the service with their own codes
    quantity: int
    order_type: OrderType
    delivery_date: datetime
    delivery_address_id: uuid.UUID
    notes: str | None = Field(None, max_length=1000)


class OrderApprove(BaseModel):
    admin_notes: str | None = Field(None, max_length=1000)


class OrderReject(BaseModel):
    # Blank reasons are rejected by the service as VALIDATION_ERROR
    rejection_reason: str = Field("", max_length=1000)


class OrderAssignmentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    farmer_id: uuid.UUID
    assigned_quantity: int
    status: AssignmentStatus
    quantity_delivered: int | None = None
    quality_result: QualityResult | None = None
    confirmed_at: datetime | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    buyer_id: uuid.UUID
    product_type: str
    quantity: int
    order_type: OrderType
    delivery_date: datetime
    delivery_address_id: uuid.UUID
    status: OrderStatus
    approved_at: datetime | None = None
    approved_by: uuid.UUID | None = None
    rejection_reason: str | None = None
    notes: str | None = None
    created_at: datetime


class OrderDetailResponse(OrderResponse):
    delivery_address: DeliveryAddressResponse | None = None
    assignments: list[OrderAssignmentSummary] = []
    total_assigned: int = 0


class PendingOrderResponse(OrderResponse):
    buyer_name: str
    business_name: str | None = None
    buyer_status: UserStatus
    delivery_address: DeliveryAddressResponse | None = None
