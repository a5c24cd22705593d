"""Order API routers: buyer order entry and admin approval."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.enums import OrderStatus
from farmlink.models.order import Order
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin, require_buyer
from farmlink.modules.buyer.schemas import DeliveryAddressResponse
from farmlink.modules.orders.constants import DEFAULT_ORDER_LIST_LIMIT
from farmlink.modules.orders.criteria import OrderCriteria
from farmlink.modules.orders.schemas import (
    OrderApprove,
    OrderAssignmentSummary,
    OrderCreate,
    OrderDetailResponse,
    OrderReject,
    OrderResponse,
    PendingOrderResponse,
)
from farmlink.modules.orders.service import OrderService
from farmlink.schemas.responses import SuccessResponse

buyer_router = APIRouter(prefix="/buyers/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


async def _detail(svc: OrderService, order: Order) -> OrderDetailResponse:
    address = await svc.get_address(order.delivery_address_id)
    assignments = (await svc.assignments_by_order([order.id])).get(order.id, [])
    return OrderDetailResponse(
        **OrderResponse.model_validate(order).model_dump(),
        delivery_address=DeliveryAddressResponse.model_validate(address) if address else None,
        assignments=[OrderAssignmentSummary.model_validate(a) for a in assignments],
        total_assigned=sum(a.assigned_quantity for a in assignments),
    )


# ---------------------------------------------------------------------------
# Buyer
# ---------------------------------------------------------------------------


@buyer_router.post("", response_model=SuccessResponse[OrderResponse], status_code=201)
async def create_order(
    body: OrderCreate,
    user: AuthenticatedUser = Depends(require_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = OrderService(db)
    order = await svc.create_order(user.id, body)
    return SuccessResponse(
        data=OrderResponse.model_validate(order),
        message="Order placed successfully. It will be reviewed by an admin.",
    )


@buyer_router.get("", response_model=SuccessResponse[list[OrderDetailResponse]])
async def list_orders(
    status: OrderStatus | None = Query(None),
    limit: int = Query(DEFAULT_ORDER_LIST_LIMIT, ge=1, le=200),
    user: AuthenticatedUser = Depends(require_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = OrderService(db)
    orders = await svc.list_buyer_orders(user.id, OrderCriteria(status=status, limit=limit))
    assignments = await svc.assignments_by_order([o.id for o in orders])
    data = [
        OrderDetailResponse(
            **OrderResponse.model_validate(o).model_dump(),
            assignments=[OrderAssignmentSummary.model_validate(a) for a in assignments.get(o.id, [])],
            total_assigned=sum(a.assigned_quantity for a in assignments.get(o.id, [])),
        )
        for o in orders
    ]
    return SuccessResponse(data=data)


@buyer_router.get("/{order_id}", response_model=SuccessResponse[OrderDetailResponse])
async def get_order(
    order_id: uuid.UUID,
    user: AuthenticatedUser = Depends(require_buyer),
    db: AsyncSession = Depends(get_db),
):
    svc = OrderService(db)
    order = await svc.get_buyer_order(user.id, order_id)
    return SuccessResponse(data=await _detail(svc, order))


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.get("/pending", response_model=SuccessResponse[list[PendingOrderResponse]])
async def list_pending_orders(
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = OrderService(db)
    rows = await svc.list_pending_orders()
    data = []
    for order, buyer in rows:
        address = await svc.get_address(order.delivery_address_id)
        data.append(
            PendingOrderResponse(
                **OrderResponse.model_validate(order).model_dump(),
                buyer_name=buyer.full_name,
                business_name=buyer.business_name,
                buyer_status=buyer.user.status,
                delivery_address=DeliveryAddressResponse.model_validate(address) if address else None,
            )
        )
    return SuccessResponse(data=data)


@admin_router.post("/{order_id}/approve", response_model=SuccessResponse[OrderResponse])
async def approve_order(
    order_id: uuid.UUID,
    body: OrderApprove,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = OrderService(db)
    order = await svc.approve_order(order_id, admin.id, body.admin_notes)
    return SuccessResponse(
        data=OrderResponse.model_validate(order),
        message="Order approved and moved to allocation",
    )


@admin_router.post("/{order_id}/reject", response_model=SuccessResponse[OrderResponse])
async def reject_order(
    order_id: uuid.UUID,
    body: OrderReject,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = OrderService(db)
    order = await svc.reject_order(order_id, admin.id, body.rejection_reason)
    return SuccessResponse(data=OrderResponse.model_validate(order), message="Order rejected")
