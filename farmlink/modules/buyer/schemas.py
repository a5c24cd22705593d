"""Pydantic v2 schemas for buyer delivery addresses."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DeliveryAddressCreate(BaseModel):
    address: str = Field(..., min_length=1, max_length=500)
    landmark: str | None = Field(None, max_length=200)
    is_default: bool | None = None


class DeliveryAddressUpdate(BaseModel):
    address: str | None = Field(None, min_length=1, max_length=500)
    landmark: str | None = Field(None, max_length=200)
    is_default: bool | None = None


class DeliveryAddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    buyer_id: uuid.UUID
    address: str
    landmark: str | None = None
    is_default: bool
    created_at: datetime
