"""Tests for AllocationService: conservation, one-shot allocation and corrections."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

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
from farmlink.models.enums import AssignmentStatus, OrderStatus, UserStatus
from farmlink.modules.allocation.schemas import AllocationRow
from farmlink.modules.allocation.service import AllocationService
from farmlink.modules.availability.week import week_start
from tests.factories import make_admin, make_availability, make_buyer, make_farmer, make_order


async def _assigned_total(db, order_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(DeliveryAssignment.assigned_quantity), 0)).where(
            DeliveryAssignment.order_id == order_id
        )
    )
    return int(result.scalar())


@pytest.fixture
async def setup(async_session):
    admin = await make_admin(async_session)
    farmer_a = await make_farmer(async_session, full_name="Ama Mensah")
    farmer_b = await make_farmer(async_session, full_name="Yaw Boateng", status=UserStatus.PROBATIONARY)
    buyer, address = await make_buyer(async_session)
    order = await make_order(async_session, buyer, address, quantity=100)
    await async_session.flush()
    return {"admin": admin, "a": farmer_a, "b": farmer_b, "order": order, "buyer": buyer, "address": address}


async def test_allocate_splits_order_and_reports_remaining(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    result = await svc.allocate(
        setup["order"].id,
        [
            AllocationRow(farmer_id=setup["a"].id, assigned_quantity=60),
            AllocationRow(farmer_id=setup["b"].id, assigned_quantity=30),
        ],
        admin_id=setup["admin"].id,
    )

    assert result.total_assigned == 90
    assert result.remaining_quantity == 10
    assert len(result.assignments) == 2
    assert all(a.status == AssignmentStatus.PENDING for a in result.assignments)
    assert all(a.delivery_address_id == setup["address"].id for a in result.assignments)
    assert await _assigned_total(async_session, setup["order"].id) == 90


async def test_allocate_exact_quantity_is_allowed(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    result = await svc.allocate(
        setup["order"].id, [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=100)]
    )
    assert result.remaining_quantity == 0


async def test_allocate_rejects_over_allocation_and_writes_nothing(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    with pytest.raises(OverAllocationException):
        await svc.allocate(
            setup["order"].id,
            [
                AllocationRow(farmer_id=setup["a"].id, assigned_quantity=70),
                AllocationRow(farmer_id=setup["b"].id, assigned_quantity=31),
            ],
        )
    assert await _assigned_total(async_session, setup["order"].id) == 0


async def test_second_allocation_is_rejected(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    await svc.allocate(setup["order"].id, [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=10)])

    with pytest.raises(AlreadyAllocatedException):
        await svc.allocate(setup["order"].id, [AllocationRow(farmer_id=setup["b"].id, assigned_quantity=1)])
    assert await _assigned_total(async_session, setup["order"].id) == 10


async def test_allocate_rejects_non_positive_rows(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    with pytest.raises(InvalidQuantityException):
        await svc.allocate(
            setup["order"].id,
            [
                AllocationRow(farmer_id=setup["a"].id, assigned_quantity=50),
                AllocationRow(farmer_id=setup["b"].id, assigned_quantity=0),
            ],
        )


async def test_allocate_requires_allocation_status(async_session, clock, setup):
    pending = await make_order(
        async_session, setup["buyer"], setup["address"], status=OrderStatus.PENDING
    )
    await async_session.flush()

    svc = AllocationService(async_session, clock=clock)
    with pytest.raises(InvalidOrderStatusException):
        await svc.allocate(pending.id, [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=5)])


async def test_allocate_unknown_order(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    with pytest.raises(OrderNotFoundException):
        await svc.allocate(uuid.uuid4(), [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=5)])


async def test_allocate_rejects_ineligible_farmers(async_session, clock, setup):
    suspended = await make_farmer(async_session, status=UserStatus.SUSPENDED)
    await async_session.flush()

    svc = AllocationService(async_session, clock=clock)
    with pytest.raises(FarmerNotFoundException) as exc_info:
        await svc.allocate(
            setup["order"].id,
            [
                AllocationRow(farmer_id=setup["a"].id, assigned_quantity=10),
                AllocationRow(farmer_id=suspended.id, assigned_quantity=10),
            ],
        )
    assert exc_info.value.details == [{"field": "farmer_id", "message": str(suspended.id)}]
    assert await _assigned_total(async_session, setup["order"].id) == 0


async def test_update_assignment_rechecks_order_total(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    result = await svc.allocate(
        setup["order"].id,
        [
            AllocationRow(farmer_id=setup["a"].id, assigned_quantity=60),
            AllocationRow(farmer_id=setup["b"].id, assigned_quantity=30),
        ],
    )
    first = result.assignments[0]

    updated = await svc.update_assignment(first.id, 70)
    assert updated.assigned_quantity == 70

    with pytest.raises(OverAllocationException):
        await svc.update_assignment(first.id, 71)
    with pytest.raises(InvalidQuantityException):
        await svc.update_assignment(first.id, 0)
    assert await _assigned_total(async_session, setup["order"].id) == 100


async def test_delete_assignment_frees_quantity(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    result = await svc.allocate(
        setup["order"].id, [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=60)]
    )
    await svc.delete_assignment(result.assignments[0].id)

    assert await _assigned_total(async_session, setup["order"].id) == 0
    with pytest.raises(AssignmentNotFoundException):
        await svc.delete_assignment(result.assignments[0].id)


async def test_corrections_refused_once_confirmed(async_session, clock, setup):
    svc = AllocationService(async_session, clock=clock)
    result = await svc.allocate(
        setup["order"].id, [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=60)]
    )
    assignment = await async_session.get(DeliveryAssignment, result.assignments[0].id)
    assignment.status = AssignmentStatus.FAILED
    assignment.confirmed_at = clock.now()
    await async_session.flush()

    with pytest.raises(InvalidAssignmentStatusException):
        await svc.update_assignment(assignment.id, 10)
    with pytest.raises(InvalidAssignmentStatusException):
        await svc.delete_assignment(assignment.id)


async def test_overview_lists_orders_and_eligible_farmers(async_session, clock, setup):
    await make_farmer(async_session, full_name="Blocked Farmer", status=UserStatus.BLOCKED)
    await make_availability(async_session, setup["a"], week_start(clock.now()))
    await async_session.flush()

    svc = AllocationService(async_session, clock=clock)
    await svc.allocate(setup["order"].id, [AllocationRow(farmer_id=setup["a"].id, assigned_quantity=25)])
    overview = await svc.allocation_overview()

    assert [o.id for o in overview.orders] == [setup["order"].id]
    assert overview.orders[0].total_assigned == 25
    assert overview.orders[0].remaining_quantity == 75

    names = [f.full_name for f in overview.farmers]
    assert names == ["Ama Mensah", "Yaw Boateng"]
    ama = overview.farmers[0]
    assert len(ama.availability) == 1
    assert ama.score is None
