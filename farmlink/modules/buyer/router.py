"""Buyer delivery-address API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.buyer import Buyer
from farmlink.modules.accounts.profiles import current_buyer
from farmlink.modules.buyer.schemas import (
    DeliveryAddressCreate,
    DeliveryAddressResponse,
    DeliveryAddressUpdate,
)
from farmlink.modules.buyer.service import BuyerService
from farmlink.schemas.responses import SuccessResponse

router = APIRouter(prefix="/buyers", tags=["buyers"])


@router.get("/delivery-addresses", response_model=SuccessResponse[list[DeliveryAddressResponse]])
async def list_delivery_addresses(
    buyer: Buyer = Depends(current_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = BuyerService(db)
    addresses = await svc.list_addresses(buyer.id)
    return SuccessResponse(data=[DeliveryAddressResponse.model_validate(a) for a in addresses])


@router.post(
    "/delivery-addresses",
    response_model=SuccessResponse[DeliveryAddressResponse],
    status_code=201,
)
async def create_delivery_address(
    body: DeliveryAddressCreate,
    buyer: Buyer = Depends(current_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = BuyerService(db)
    address = await svc.create_address(buyer.id, body)
    return SuccessResponse(
        data=DeliveryAddressResponse.model_validate(address),
        message="Delivery address created successfully",
    )


@router.put("/delivery-addresses/{address_id}", response_model=SuccessResponse[DeliveryAddressResponse])
async def update_delivery_address(
    address_id: uuid.UUID,
    body: DeliveryAddressUpdate,
    buyer: Buyer = Depends(current_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = BuyerService(db)
    address = await svc.update_address(buyer.id, address_id, body)
    return SuccessResponse(
        data=DeliveryAddressResponse.model_validate(address),
        message="Delivery address updated successfully",
    )


@router.delete("/delivery-addresses/{address_id}", response_model=SuccessResponse[None])
async def delete_delivery_address(
    address_id: uuid.UUID,
    buyer: Buyer = Depends(current_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = BuyerService(db)
    await svc.delete_address(buyer.id, address_id)
    return SuccessResponse(data=None, message="Delivery address deleted successfully")
