"""Pydantic v2 schemas for delivery confirmation and assignment views."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from farmlink.models.enums import AssignmentStatus, BuyerType, OrderType, QualityResult
from farmlink.schemas.responses import PageMeta


class DeliveryConfirm(BaseModel):
    delivered: bool
    # Range is checked against the assignment by the service (INVALID_QUANTITY)
    quantity_delivered: int | None = None
    quality_result: QualityResult | None = None
    notes: str | None = Field(None, max_length=1000)


class DeliveryAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    farmer_id: uuid.UUID
    assigned_quantity: int
    delivery_date: datetime
    delivery_address_id: uuid.UUID
    status: AssignmentStatus
    quantity_delivered: int | None = None
    quality_result: QualityResult | None = None
    confirmation_notes: str | None = None
    confirmed_by: uuid.UUID | None = None
    confirmed_at: datetime | None = None
    created_at: datetime


class AdminAssignmentView(DeliveryAssignmentResponse):
    farmer_name: str
    product_type: str
    order_quantity: int


class AdminAssignmentList(BaseModel):
    items: list[AdminAssignmentView]
    meta: PageMeta


class AddressDetails(BaseModel):
    address: str
    landmark: str | None = None


class BuyerSummary(BaseModel):
    """All a farmer gets to know about who they deliver to."""

    buyer_type: BuyerType


class FarmerAssignmentView(BaseModel):
    id: uuid.UUID
    assigned_quantity: int
    delivery_date: datetime
    status: AssignmentStatus
    quantity_delivered: int | None = None
    quality_result: QualityResult | None = None
    confirmed_at: datetime | None = None
    created_at: datetime
    order_product_type: str
    order_quantity: int
    order_type: OrderType
    order_notes: str | None = None
    delivery_address: AddressDetails
    buyer: BuyerSummary
