"""Allocation engine: splits an approved order across farmers' delivery assignments.

Conservation rule: the assigned quantities of an order's assignments never
sum past the order's quantity. Allocation is one-shot per order; later
corrections go through ``update_assignment`` / ``delete_assignment`` while
the assignment is still PENDING.

Every check-then-write sequence runs under a row lock on the order
(``SELECT ... FOR UPDATE``) so two admins allocating the same order
serialise instead of both passing the "no assignments yet" check.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    AlreadyAllocatedException,
    AssignmentNotFoundException,
    FarmerNotFoundException,
    InvalidAssignmentStatusException,
    InvalidOrderStatusException,
    InvalidQuantityException,
    OrderNotFoundException,
    OverAllocationException,
)
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus, OrderStatus
from farmlink.models.farmer import Farmer
from farmlink.models.farmer_performance import FarmerPerformance
from farmlink.models.order import Order
from farmlink.models.user import User
from farmlink.models.weekly_availability import WeeklyAvailability
from farmlink.modules.allocation.schemas import (
    AllocationOverview,
    AllocationResult,
    AllocationRow,
    AssignmentResponse,
    AvailabilitySummary,
    FarmerAllocationView,
    OrderAllocationView,
)
from farmlink.modules.availability.week import week_start
from farmlink.modules.orders.constants import ELIGIBLE_FARMER_STATUSES
from farmlink.modules.orders.schemas import OrderResponse

logger = logging.getLogger(__name__)


class AllocationService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------

    async def allocation_overview(self) -> AllocationOverview:
        """Orders awaiting allocation plus the farmers who could fill them."""
        current_week = week_start(self.clock.now())

        orders_result = await self.db.execute(
            select(Order)
            .where(Order.status == OrderStatus.ALLOCATION)
            .order_by(Order.delivery_date.asc())
        )
        orders = list(orders_result.scalars().all())

        assignments_by_order: dict[uuid.UUID, list[DeliveryAssignment]] = {o.id: [] for o in orders}
        if orders:
            assignments_result = await self.db.execute(
                select(DeliveryAssignment)
                .where(DeliveryAssignment.order_id.in_(assignments_by_order.keys()))
                .order_by(DeliveryAssignment.created_at.asc())
            )
            for assignment in assignments_result.scalars().all():
                assignments_by_order[assignment.order_id].append(assignment)

        order_views = []
        for order in orders:
            assignments = assignments_by_order[order.id]
            total = sum(a.assigned_quantity for a in assignments)
            order_views.append(
                OrderAllocationView(
                    **OrderResponse.model_validate(order).model_dump(),
                    assignments=[AssignmentResponse.model_validate(a) for a in assignments],
                    total_assigned=total,
                    remaining_quantity=order.quantity - total,
                )
            )

        farmers_result = await self.db.execute(
            select(Farmer, FarmerPerformance)
            .join(User, Farmer.user_id == User.id)
            .outerjoin(FarmerPerformance, FarmerPerformance.farmer_id == Farmer.id)
            .where(User.status.in_(ELIGIBLE_FARMER_STATUSES))
            .order_by(Farmer.full_name.asc())
        )
        farmer_rows = farmers_result.all()

        availability_by_farmer: dict[uuid.UUID, list[WeeklyAvailability]] = {
            farmer.id: [] for farmer, _ in farmer_rows
        }
        if farmer_rows:
            availability_result = await self.db.execute(
                select(WeeklyAvailability).where(
                    WeeklyAvailability.farmer_id.in_(availability_by_farmer.keys()),
                    WeeklyAvailability.week_start_date == current_week,
                )
            )
            for row in availability_result.scalars().all():
                availability_by_farmer[row.farmer_id].append(row)

        farmer_views = [
            FarmerAllocationView(
                id=farmer.id,
                full_name=farmer.full_name,
                farm_name=farmer.farm_name,
                region=farmer.region,
                town=farmer.town,
                produce_category=farmer.produce_category,
                weekly_capacity_min=farmer.weekly_capacity_min,
                weekly_capacity_max=farmer.weekly_capacity_max,
                status=farmer.user.status,
                score=performance.score if performance else None,
                tier=performance.tier if performance else None,
                availability=[
                    AvailabilitySummary.model_validate(a) for a in availability_by_farmer[farmer.id]
                ],
            )
            for farmer, performance in farmer_rows
        ]

        return AllocationOverview(
            current_week_start=current_week,
            orders=order_views,
            farmers=farmer_views,
        )

    # ------------------------------------------------------------------
    # Allocate
    # ------------------------------------------------------------------

    async def allocate(
        self,
        order_id: uuid.UUID,
        rows: list[AllocationRow],
        admin_id: uuid.UUID | None = None,
    ) -> AllocationResult:
        """Create one PENDING assignment per row, all or nothing."""
        async with self.uow.transaction():
            order = await self.uow.get_for_update(Order, order_id)
            if order is None:
                raise OrderNotFoundException(f"Order {order_id} not found")

            if order.status != OrderStatus.ALLOCATION:
                raise InvalidOrderStatusException(
                    f"Order is not in ALLOCATION status. Current status: {order.status.value}"
                )

            existing = await self.db.execute(
                select(func.count())
                .select_from(DeliveryAssignment)
                .where(DeliveryAssignment.order_id == order.id)
            )
            if (existing.scalar() or 0) > 0:
                raise AlreadyAllocatedException(
                    "Order already has delivery assignments. "
                    "Update or delete existing assignments instead."
                )

            total = sum(row.assigned_quantity for row in rows)
            if total > order.quantity:
                raise OverAllocationException(
                    f"Total assigned quantity ({total}) exceeds order quantity ({order.quantity})"
                )
            if total <= 0 or any(row.assigned_quantity <= 0 for row in rows):
                raise InvalidQuantityException("Assigned quantities must be greater than 0")

            requested = list(dict.fromkeys(row.farmer_id for row in rows))
            eligible_result = await self.db.execute(
                select(Farmer.id)
                .join(User, Farmer.user_id == User.id)
                .where(Farmer.id.in_(requested), User.status.in_(ELIGIBLE_FARMER_STATUSES))
            )
            eligible = set(eligible_result.scalars().all())
            missing = [farmer_id for farmer_id in requested if farmer_id not in eligible]
            if missing:
                raise FarmerNotFoundException(
                    "One or more farmers not found or not active",
                    details=[{"field": "farmer_id", "message": str(farmer_id)} for farmer_id in missing],
                )

            assignments = []
            for row in rows:
                assignment = DeliveryAssignment(
                    order_id=order.id,
                    farmer_id=row.farmer_id,
                    assigned_quantity=row.assigned_quantity,
                    delivery_date=order.delivery_date,
                    delivery_address_id=order.delivery_address_id,
                    status=AssignmentStatus.PENDING,
                )
                self.db.add(assignment)
                assignments.append(assignment)
            await self.db.flush()

        logger.info(
            "Order %s allocated %d/%d across %d farmers by %s",
            order_id, total, order.quantity, len(assignments), admin_id,
        )
        return AllocationResult(
            assignments=[AssignmentResponse.model_validate(a) for a in assignments],
            total_assigned=total,
            remaining_quantity=order.quantity - total,
        )

    # ------------------------------------------------------------------
    # Corrections
    # ------------------------------------------------------------------

    async def _get_pending_for_update(self, assignment_id: uuid.UUID, action: str) -> DeliveryAssignment:
        assignment = await self.uow.get_for_update(DeliveryAssignment, assignment_id)
        if assignment is None:
            raise AssignmentNotFoundException("Assignment not found")
        if assignment.status != AssignmentStatus.PENDING:
            raise InvalidAssignmentStatusException(
                f"Cannot {action} assignment with status: {assignment.status.value}"
            )
        return assignment

    async def update_assignment(
        self,
        assignment_id: uuid.UUID,
        assigned_quantity: int,
        admin_id: uuid.UUID | None = None,
    ) -> DeliveryAssignment:
        """Change a PENDING assignment's quantity, re-checking the order's total."""
        async with self.uow.transaction():
            assignment = await self._get_pending_for_update(assignment_id, "update")
            if assigned_quantity <= 0:
                raise InvalidQuantityException("Assigned quantity must be greater than 0")

            order = await self.uow.get_for_update(Order, assignment.order_id)
            others = await self.db.execute(
                select(func.coalesce(func.sum(DeliveryAssignment.assigned_quantity), 0)).where(
                    DeliveryAssignment.order_id == assignment.order_id,
                    DeliveryAssignment.id != assignment.id,
                )
            )
            new_total = int(others.scalar() or 0) + assigned_quantity
            if new_total > order.quantity:
                raise OverAllocationException(
                    f"Total assigned quantity ({new_total}) would exceed order quantity ({order.quantity})"
                )

            previous = assignment.assigned_quantity
            assignment.assigned_quantity = assigned_quantity
            await self.db.flush()

        logger.info(
            "Assignment %s quantity %d -> %d by %s", assignment_id, previous, assigned_quantity, admin_id
        )
        return assignment

    async def delete_assignment(self, assignment_id: uuid.UUID, admin_id: uuid.UUID | None = None) -> None:
        async with self.uow.transaction():
            assignment = await self._get_pending_for_update(assignment_id, "delete")
            await self.db.delete(assignment)
            await self.db.flush()

        logger.info("Assignment %s deleted by %s", assignment_id, admin_id)
