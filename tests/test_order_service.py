"""Tests for OrderService: buyer order entry and admin gating."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

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
from farmlink.models.enums import OrderStatus, OrderType, UserStatus
from farmlink.modules.orders.constants import can_transition
from farmlink.modules.orders.criteria import OrderCriteria
from farmlink.modules.orders.schemas import OrderCreate
from farmlink.modules.orders.service import OrderService
from tests.factories import make_admin, make_buyer


def _order(clock, address_id, quantity=40, days_ahead=4, notes=None):
    return OrderCreate(
        product_type=" Broilers ",
        quantity=quantity,
        order_type=OrderType.ONE_TIME,
        delivery_date=clock.now() + timedelta(days=days_ahead),
        delivery_address_id=address_id,
        notes=notes,
    )


@pytest.mark.parametrize(
    ("current", "target", "allowed"),
    [
        (OrderStatus.PENDING, OrderStatus.ALLOCATION, True),
        (OrderStatus.PENDING, OrderStatus.REJECTED, True),
        (OrderStatus.ALLOCATION, OrderStatus.DELIVERED, True),
        (OrderStatus.PENDING, OrderStatus.DELIVERED, False),
        (OrderStatus.REJECTED, OrderStatus.ALLOCATION, False),
        (OrderStatus.DELIVERED, OrderStatus.ALLOCATION, False),
        (OrderStatus.APPROVED, OrderStatus.ALLOCATION, False),
    ],
)
def test_order_transitions(current, target, allowed):
    assert can_transition(current, target) is allowed


async def test_buyer_places_and_admin_approves(async_session, clock):
    admin = await make_admin(async_session)
    buyer, address = await make_buyer(async_session)
    svc = OrderService(async_session, clock=clock)

    order = await svc.create_order(buyer.user_id, _order(clock, address.id, notes="Ring bell"))
    assert order.status == OrderStatus.PENDING
    assert order.product_type == "Broilers"

    approved = await svc.approve_order(order.id, admin.id, admin_notes="Priority customer")
    assert approved.status == OrderStatus.ALLOCATION
    assert approved.approved_by == admin.id
    assert approved.approved_at == clock.now()
    assert approved.notes == "Ring bell\n[Admin]: Priority customer"

    with pytest.raises(InvalidOrderStatusException):
        await svc.approve_order(order.id, admin.id)


async def test_reject_requires_reason(async_session, clock):
    admin = await make_admin(async_session)
    buyer, address = await make_buyer(async_session)
    svc = OrderService(async_session, clock=clock)
    order = await svc.create_order(buyer.user_id, _order(clock, address.id))

    with pytest.raises(ValidationException):
        await svc.reject_order(order.id, admin.id, "   ")

    rejected = await svc.reject_order(order.id, admin.id, " Out of season ")
    assert rejected.status == OrderStatus.REJECTED
    assert rejected.rejection_reason == "Out of season"

    with pytest.raises(InvalidOrderStatusException):
        await svc.approve_order(order.id, admin.id)


async def test_create_order_validation(async_session, clock):
    buyer, address = await make_buyer(async_session)
    _, other_address = await make_buyer(async_session)
    svc = OrderService(async_session, clock=clock)

    with pytest.raises(AddressNotFoundException):
        await svc.create_order(buyer.user_id, _order(clock, other_address.id))
    with pytest.raises(InvalidQuantityException):
        await svc.create_order(buyer.user_id, _order(clock, address.id, quantity=0))
    with pytest.raises(InvalidDeliveryDateException):
        await svc.create_order(buyer.user_id, _order(clock, address.id, days_ahead=0))


async def test_inactive_buyer_cannot_order(async_session, clock):
    buyer, address = await make_buyer(async_session, status=UserStatus.PENDING)
    svc = OrderService(async_session, clock=clock)
    with pytest.raises(BuyerNotActiveException):
        await svc.create_order(buyer.user_id, _order(clock, address.id))


async def test_suspended_buyer_orders_cannot_be_approved(async_session, clock):
    admin = await make_admin(async_session)
    buyer, address = await make_buyer(async_session)
    svc = OrderService(async_session, clock=clock)
    order = await svc.create_order(buyer.user_id, _order(clock, address.id))

    buyer.user.status = UserStatus.SUSPENDED
    await async_session.flush()

    with pytest.raises(BuyerSuspendedException):
        await svc.approve_order(order.id, admin.id)


async def test_listing_and_ownership(async_session, clock):
    buyer, address = await make_buyer(async_session)
    other, other_address = await make_buyer(async_session)
    svc = OrderService(async_session, clock=clock)

    first = await svc.create_order(buyer.user_id, _order(clock, address.id))
    clock.advance(minutes=5)
    second = await svc.create_order(buyer.user_id, _order(clock, address.id))
    foreign = await svc.create_order(other.user_id, _order(clock, other_address.id))

    mine = await svc.list_buyer_orders(buyer.user_id, OrderCriteria())
    assert {o.id for o in mine} == {first.id, second.id}

    pending = await svc.list_pending_orders()
    assert [order.id for order, _ in pending][:1] == [first.id]
    assert len(pending) == 3

    with pytest.raises(OrderNotFoundException):
        await svc.get_buyer_order(buyer.user_id, foreign.id)
    with pytest.raises(OrderNotFoundException):
        await svc.get_order(uuid.uuid4())
