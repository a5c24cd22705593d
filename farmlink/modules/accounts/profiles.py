"""Resolve the farmer or buyer profile behind an authenticated user."""

from __future__ import annotations

import uuid

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.exceptions import BuyerNotFoundException, FarmerNotFoundException
from farmlink.models.buyer import Buyer
from farmlink.models.farmer import Farmer
from farmlink.modules.accounts.auth import AuthenticatedUser, require_buyer, require_farmer


async def get_farmer_for_user(db: AsyncSession, user_id: uuid.UUID) -> Farmer:
    result = await db.execute(select(Farmer).where(Farmer.user_id == user_id))
    farmer = result.scalar_one_or_none()
    if farmer is None:
        raise FarmerNotFoundException("Farmer profile not found")
    return farmer


async def get_buyer_for_user(db: AsyncSession, user_id: uuid.UUID) -> Buyer:
    result = await db.execute(select(Buyer).where(Buyer.user_id == user_id))
    buyer = result.scalar_one_or_none()
    if buyer is None:
        raise BuyerNotFoundException("Buyer profile not found")
    return buyer


async def current_farmer(
    user: AuthenticatedUser = Depends(require_farmer),
    db: AsyncSession = Depends(get_db),
) -> Farmer:
    """FastAPI dependency: the calling farmer's profile."""
    return await get_farmer_for_user(db, user.id)


async def current_buyer(
    user: AuthenticatedUser = Depends(require_buyer),
    db: AsyncSession = Depends(get_db),
) -> Buyer:
    """FastAPI dependency: the calling buyer's profile."""
    return await get_buyer_for_user(db, user.id)
