"""Buyer delivery-address book."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import AddressInUseException, AddressNotFoundException
from farmlink.models.delivery_address import DeliveryAddress
from farmlink.models.order import Order
from farmlink.modules.buyer.schemas import DeliveryAddressCreate, DeliveryAddressUpdate

logger = logging.getLogger(__name__)


class BuyerService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Delivery addresses
    # ------------------------------------------------------------------

    async def _get_address(self, buyer_id: uuid.UUID, address_id: uuid.UUID) -> DeliveryAddress:
        result = await self.db.execute(
            select(DeliveryAddress).where(
                DeliveryAddress.id == address_id,
                DeliveryAddress.buyer_id == buyer_id,
            )
        )
        address = result.scalar_one_or_none()
        if address is None:
            raise AddressNotFoundException("Delivery address not found")
        return address

    async def _clear_default(self, buyer_id: uuid.UUID, keep_id: uuid.UUID | None = None) -> None:
        stmt = (
            update(DeliveryAddress)
            .where(DeliveryAddress.buyer_id == buyer_id, DeliveryAddress.is_default.is_(True))
            .values(is_default=False)
        )
        if keep_id is not None:
            stmt = stmt.where(DeliveryAddress.id != keep_id)
        await self.db.execute(stmt)

    async def list_addresses(self, buyer_id: uuid.UUID) -> list[DeliveryAddress]:
        """Default address first, then oldest first."""
        result = await self.db.execute(
            select(DeliveryAddress)
            .where(DeliveryAddress.buyer_id == buyer_id)
            .order_by(DeliveryAddress.is_default.desc(), DeliveryAddress.created_at.asc())
        )
        return list(result.scalars().all())

    async def create_address(self, buyer_id: uuid.UUID, data: DeliveryAddressCreate) -> DeliveryAddress:
        async with self.uow.transaction():
            if data.is_default:
                await self._clear_default(buyer_id)
                is_default = True
            else:
                existing = await self.db.execute(
                    select(DeliveryAddress.id).where(
                        DeliveryAddress.buyer_id == buyer_id,
                        DeliveryAddress.is_default.is_(True),
                    )
                )
                # The buyer's first address becomes the default unless told otherwise
                is_default = data.is_default is None and existing.scalars().first() is None

            address = DeliveryAddress(
                buyer_id=buyer_id,
                address=data.address.strip(),
                landmark=data.landmark,
                is_default=is_default,
            )
            self.db.add(address)
            await self.db.flush()

        logger.info("Buyer %s added delivery address %s", buyer_id, address.id)
        return address

    async def update_address(
        self, buyer_id: uuid.UUID, address_id: uuid.UUID, data: DeliveryAddressUpdate
    ) -> DeliveryAddress:
        address = await self._get_address(buyer_id, address_id)
        changes = data.model_dump(exclude_unset=True)

        async with self.uow.transaction():
            if changes.get("is_default"):
                await self._clear_default(buyer_id, keep_id=address.id)
            for field, value in changes.items():
                if value is None and field != "landmark":
                    continue
                setattr(address, field, value.strip() if field == "address" else value)
            await self.db.flush()

        return address

    async def delete_address(self, buyer_id: uuid.UUID, address_id: uuid.UUID) -> None:
        address = await self._get_address(buyer_id, address_id)

        in_use = await self.db.execute(
            select(Order.id).where(Order.delivery_address_id == address_id).limit(1)
        )
        if in_use.scalars().first() is not None:
            raise AddressInUseException(
                "Cannot delete address that is being used by existing orders"
            )

        async with self.uow.transaction():
            was_default = address.is_default
            await self.db.delete(address)
            await self.db.flush()

            if was_default:
                remaining = await self.db.execute(
                    select(DeliveryAddress)
                    .where(DeliveryAddress.buyer_id == buyer_id)
                    .order_by(DeliveryAddress.created_at.asc())
                    .limit(1)
                )
                successor = remaining.scalars().first()
                if successor is not None:
                    successor.is_default = True
                    await self.db.flush()

        logger.info("Buyer %s deleted delivery address %s", buyer_id, address_id)
