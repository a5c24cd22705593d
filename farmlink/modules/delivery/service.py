"""Delivery confirmation: records assignment outcomes and rolls them up to orders."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    AssignmentNotFoundException,
    InvalidAssignmentStatusException,
    InvalidQuantityException,
)
from farmlink.models.buyer import Buyer
from farmlink.models.delivery_address import DeliveryAddress
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus, OrderStatus
from farmlink.models.farmer import Farmer
from farmlink.models.order import Order
from farmlink.modules.delivery.criteria import AssignmentCriteria, FarmerAssignmentCriteria
from farmlink.modules.delivery.schemas import (
    AddressDetails,
    AdminAssignmentView,
    BuyerSummary,
    DeliveryAssignmentResponse,
    DeliveryConfirm,
    FarmerAssignmentView,
)
from farmlink.modules.orders.constants import ASSIGNMENT_TRANSITIONS, can_transition

logger = logging.getLogger(__name__)


def confirmation_reason(assignment: DeliveryAssignment) -> str:
    if assignment.status == AssignmentStatus.FAILED:
        return "Delivery failed"
    if assignment.quality_result is not None:
        return f"Delivery confirmed - quality {assignment.quality_result.value}"
    return "Delivery confirmed"


class DeliveryService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def confirm_delivery(
        self,
        assignment_id: uuid.UUID,
        admin_id: uuid.UUID,
        data: DeliveryConfirm,
    ) -> DeliveryAssignment:
        """Close out a PENDING assignment as DELIVERED or FAILED.

        The confirmation and the order roll-up commit together. Rescoring
        the farmer runs in a savepoint inside the same transaction; if it
        fails only the savepoint is rolled back, the confirmation still
        stands and the nightly recompute catches up.
        """
        async with self.uow.transaction():
            assignment = await self.uow.get_for_update(DeliveryAssignment, assignment_id)
            if assignment is None:
                raise AssignmentNotFoundException("Assignment not found")

            target = AssignmentStatus.DELIVERED if data.delivered else AssignmentStatus.FAILED
            if target not in ASSIGNMENT_TRANSITIONS.get(assignment.status, set()):
                raise InvalidAssignmentStatusException(
                    f"Assignment already confirmed with status: {assignment.status.value}"
                )

            if data.delivered:
                quantity = (
                    data.quantity_delivered
                    if data.quantity_delivered is not None
                    else assignment.assigned_quantity
                )
                if not 0 <= quantity <= assignment.assigned_quantity:
                    raise InvalidQuantityException(
                        f"Quantity delivered must be between 0 and {assignment.assigned_quantity}"
                    )
                quality = data.quality_result
            else:
                quantity = None
                quality = None

            # Single flush: the row becomes read-only once its stored status is final
            assignment.status = target
            assignment.quantity_delivered = quantity
            assignment.quality_result = quality
            assignment.confirmation_notes = data.notes.strip() if data.notes else None
            assignment.confirmed_by = admin_id
            assignment.confirmed_at = self.clock.now()
            await self.db.flush()

            await self._roll_up_order(assignment.order_id)
            logger.info(
                "Assignment %s confirmed %s (qty=%s, quality=%s) by %s",
                assignment_id,
                target.value,
                quantity,
                quality.value if quality else None,
                admin_id,
            )

            await self._rescore(assignment, admin_id)

        return assignment

    async def _roll_up_order(self, order_id: uuid.UUID) -> None:
        """Mark the order DELIVERED once none of its assignments is PENDING."""
        pending = await self.db.execute(
            select(func.count())
            .select_from(DeliveryAssignment)
            .where(
                DeliveryAssignment.order_id == order_id,
                DeliveryAssignment.status == AssignmentStatus.PENDING,
            )
        )
        if (pending.scalar() or 0) > 0:
            return

        order = await self.uow.get_for_update(Order, order_id)
        if order is None or order.status == OrderStatus.DELIVERED:
            return
        if not can_transition(order.status, OrderStatus.DELIVERED):
            logger.warning(
                "Order %s has no pending assignments but is %s; leaving it unchanged",
                order_id, order.status.value,
            )
            return

        order.status = OrderStatus.DELIVERED
        await self.db.flush()
        logger.info("Order %s delivered: all assignments confirmed", order_id)

    async def _rescore(self, assignment: DeliveryAssignment, admin_id: uuid.UUID) -> None:
        from farmlink.modules.performance.service import PerformanceService

        try:
            async with self.uow.transaction():
                await PerformanceService(self.db, clock=self.clock).recompute(
                    assignment.farmer_id,
                    reason=confirmation_reason(assignment),
                    delivery_assignment_id=assignment.id,
                    created_by=admin_id,
                )
        except Exception:
            logger.exception(
                "Performance recompute failed for farmer %s after assignment %s",
                assignment.farmer_id, assignment.id,
            )

    # ------------------------------------------------------------------
    # Admin listing
    # ------------------------------------------------------------------

    async def list_assignments(
        self, criteria: AssignmentCriteria | None = None
    ) -> tuple[list[AdminAssignmentView], int]:
        criteria = criteria or AssignmentCriteria()

        count_query = criteria.apply(select(func.count()).select_from(DeliveryAssignment))
        total = (await self.db.execute(count_query)).scalar() or 0

        query = criteria.apply(
            select(DeliveryAssignment, Farmer.full_name, Order.product_type, Order.quantity)
            .join(Farmer, DeliveryAssignment.farmer_id == Farmer.id)
            .join(Order, DeliveryAssignment.order_id == Order.id)
        )
        result = await self.db.execute(
            query.order_by(DeliveryAssignment.delivery_date.asc(), DeliveryAssignment.created_at.asc())
            .offset(criteria.offset)
            .limit(criteria.limit)
        )
        views = [
            AdminAssignmentView(
                **DeliveryAssignmentResponse.model_validate(assignment).model_dump(),
                farmer_name=farmer_name,
                product_type=product_type,
                order_quantity=order_quantity,
            )
            for assignment, farmer_name, product_type, order_quantity in result.all()
        ]
        return views, total

    # ------------------------------------------------------------------
    # Farmer views
    # ------------------------------------------------------------------

    def _farmer_query(self, farmer_id: uuid.UUID):
        return (
            select(DeliveryAssignment, Order, DeliveryAddress, Buyer.buyer_type)
            .join(Order, DeliveryAssignment.order_id == Order.id)
            .join(DeliveryAddress, DeliveryAssignment.delivery_address_id == DeliveryAddress.id)
            .join(Buyer, Order.buyer_id == Buyer.id)
            .where(DeliveryAssignment.farmer_id == farmer_id)
        )

    @staticmethod
    def _farmer_view(assignment, order, address, buyer_type) -> FarmerAssignmentView:
        return FarmerAssignmentView(
            id=assignment.id,
            assigned_quantity=assignment.assigned_quantity,
            delivery_date=assignment.delivery_date,
            status=assignment.status,
            quantity_delivered=assignment.quantity_delivered,
            quality_result=assignment.quality_result,
            confirmed_at=assignment.confirmed_at,
            created_at=assignment.created_at,
            order_product_type=order.product_type,
            order_quantity=order.quantity,
            order_type=order.order_type,
            order_notes=order.notes,
            delivery_address=AddressDetails(address=address.address, landmark=address.landmark),
            buyer=BuyerSummary(buyer_type=buyer_type),
        )

    async def list_for_farmer(
        self, farmer_id: uuid.UUID, criteria: FarmerAssignmentCriteria | None = None
    ) -> list[FarmerAssignmentView]:
        """The farmer's assignments by delivery date. Buyer identity is withheld."""
        criteria = criteria or FarmerAssignmentCriteria()
        query = criteria.apply(self._farmer_query(farmer_id)).order_by(DeliveryAssignment.delivery_date.asc())
        result = await self.db.execute(query)
        return [self._farmer_view(*row) for row in result.all()]

    async def get_farmer_assignment(self, farmer_id: uuid.UUID, assignment_id: uuid.UUID) -> FarmerAssignmentView:
        result = await self.db.execute(
            self._farmer_query(farmer_id).where(DeliveryAssignment.id == assignment_id)
        )
        row = result.first()
        if row is None:
            raise AssignmentNotFoundException("Delivery assignment not found")
        return self._farmer_view(*row)
