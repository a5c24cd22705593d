"""Order lifecycle: buyer demand records and admin gating."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock, as_utc
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    AddressNotFoundException,
    BuyerNotActiveException,
    BuyerSuspendedException,
    InvalidDeliveryDateException,
    InvalidOrderStatusException,
    InvalidQuantityException,
    OrderNotFoundException,
    ValidationException,
)
from farmlink.models.buyer import Buyer
from farmlink.models.delivery_address import DeliveryAddress
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import OrderStatus, UserStatus
from farmlink.models.order import Order
from farmlink.modules.accounts.profiles import get_buyer_for_user
from farmlink.modules.orders.constants import can_transition
from farmlink.modules.orders.criteria import OrderCriteria
from farmlink.modules.orders.schemas import OrderCreate

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_order(self, order_id: uuid.UUID) -> Order:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundException(f"Order {order_id} not found")
        return order

    async def get_address(self, address_id: uuid.UUID) -> DeliveryAddress | None:
        result = await self.db.execute(select(DeliveryAddress).where(DeliveryAddress.id == address_id))
        return result.scalar_one_or_none()

    async def assignments_by_order(
        self, order_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, list[DeliveryAssignment]]:
        grouped: dict[uuid.UUID, list[DeliveryAssignment]] = defaultdict(list)
        if not order_ids:
            return grouped
        result = await self.db.execute(
            select(DeliveryAssignment)
            .where(DeliveryAssignment.order_id.in_(order_ids))
            .order_by(DeliveryAssignment.created_at.asc())
        )
        for assignment in result.scalars().all():
            grouped[assignment.order_id].append(assignment)
        return grouped

    # ------------------------------------------------------------------
    # Buyer operations
    # ------------------------------------------------------------------

    async def create_order(self, buyer_user_id: uuid.UUID, data: OrderCreate) -> Order:
        buyer = await get_buyer_for_user(self.db, buyer_user_id)
        if buyer.user.status != UserStatus.ACTIVE:
            raise BuyerNotActiveException("Your account is not active. Please contact support.")

        address = await self.db.execute(
            select(DeliveryAddress.id).where(
                DeliveryAddress.id == data.delivery_address_id,
                DeliveryAddress.buyer_id == buyer.id,
            )
        )
        if address.scalars().first() is None:
            raise AddressNotFoundException("Delivery address not found or does not belong to you")

        if data.quantity <= 0:
            raise InvalidQuantityException("Quantity must be greater than 0")
        if as_utc(data.delivery_date) <= self.clock.now():
            raise InvalidDeliveryDateException("Delivery date must be in the future")

        notes = data.notes.strip() if data.notes else None
        order = Order(
            buyer_id=buyer.id,
            product_type=data.product_type.strip(),
            quantity=data.quantity,
            order_type=data.order_type,
            delivery_date=as_utc(data.delivery_date),
            delivery_address_id=data.delivery_address_id,
            status=OrderStatus.PENDING,
            notes=notes or None,
        )
        self.db.add(order)
        await self.db.flush()

        logger.info(
            "Buyer %s placed order %s: %d %s for %s",
            buyer.id, order.id, order.quantity, order.product_type, order.delivery_date.date(),
        )
        return order

    async def list_buyer_orders(
        self, buyer_user_id: uuid.UUID, criteria: OrderCriteria | None = None
    ) -> list[Order]:
        """The buyer's orders, newest first."""
        criteria = criteria or OrderCriteria()
        buyer = await get_buyer_for_user(self.db, buyer_user_id)
        query = criteria.apply(
            select(Order).where(Order.buyer_id == buyer.id).order_by(Order.created_at.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_buyer_order(self, buyer_user_id: uuid.UUID, order_id: uuid.UUID) -> Order:
        buyer = await get_buyer_for_user(self.db, buyer_user_id)
        result = await self.db.execute(
            select(Order).where(Order.id == order_id, Order.buyer_id == buyer.id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundException("Order not found")
        return order

    # ------------------------------------------------------------------
    # Admin gating
    # ------------------------------------------------------------------

    async def list_pending_orders(self) -> list[tuple[Order, Buyer]]:
        """Orders awaiting review, oldest first, with their buyers."""
        result = await self.db.execute(
            select(Order, Buyer)
            .join(Buyer, Order.buyer_id == Buyer.id)
            .where(Order.status == OrderStatus.PENDING)
            .order_by(Order.created_at.asc())
        )
        return [(order, buyer) for order, buyer in result.all()]

    async def approve_order(
        self, order_id: uuid.UUID, admin_id: uuid.UUID, admin_notes: str | None = None
    ) -> Order:
        """PENDING → ALLOCATION. The order then waits for farmers to be assigned."""
        order = await self.get_order(order_id)
        if not can_transition(order.status, OrderStatus.ALLOCATION):
            raise InvalidOrderStatusException(
                f"Cannot approve order with status: {order.status.value}"
            )

        buyer_result = await self.db.execute(select(Buyer).where(Buyer.id == order.buyer_id))
        buyer = buyer_result.scalar_one()
        if buyer.user.status == UserStatus.SUSPENDED:
            raise BuyerSuspendedException("Cannot approve order from suspended buyer")

        order.status = OrderStatus.ALLOCATION
        order.approved_at = self.clock.now()
        order.approved_by = admin_id
        if admin_notes and admin_notes.strip():
            order.notes = f"{order.notes or ''}\n[Admin]: {admin_notes.strip()}".strip()
        await self.db.flush()

        logger.info("Order %s approved by %s", order_id, admin_id)
        return order

    async def reject_order(self, order_id: uuid.UUID, admin_id: uuid.UUID, rejection_reason: str) -> Order:
        reason = (rejection_reason or "").strip()
        if not reason:
            raise ValidationException(
                "Rejection reason is required",
                details=[{"field": "rejection_reason", "message": "must not be blank"}],
            )

        order = await self.get_order(order_id)
        if not can_transition(order.status, OrderStatus.REJECTED):
            raise InvalidOrderStatusException(
                f"Cannot reject order with status: {order.status.value}"
            )

        order.status = OrderStatus.REJECTED
        order.approved_by = admin_id
        order.rejection_reason = reason
        await self.db.flush()

        logger.info("Order %s rejected by %s", order_id, admin_id)
        return order
