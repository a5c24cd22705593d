"""Delivery API routers: admin confirmation and the farmer's delivery schedule."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.enums import AssignmentStatus
from farmlink.models.farmer import Farmer
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.accounts.profiles import current_farmer
from farmlink.modules.delivery.criteria import AssignmentCriteria, FarmerAssignmentCriteria
from farmlink.modules.delivery.schemas import (
    AdminAssignmentList,
    DeliveryAssignmentResponse,
    DeliveryConfirm,
    FarmerAssignmentView,
)
from farmlink.modules.delivery.service import DeliveryService
from farmlink.schemas.responses import PageMeta, SuccessResponse

admin_router = APIRouter(prefix="/admin/deliveries", tags=["admin"])
farmer_router = APIRouter(prefix="/farmers/deliveries", tags=["deliveries"])


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=SuccessResponse[AdminAssignmentList])
async def list_assignments(
    status: AssignmentStatus | None = Query(None),
    order_id: uuid.UUID | None = Query(None),
    farmer_id: uuid.UUID | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = DeliveryService(db)
    criteria = AssignmentCriteria(
        status=status, order_id=order_id, farmer_id=farmer_id, limit=limit, offset=offset
    )
    items, total = await svc.list_assignments(criteria)
    return SuccessResponse(
        data=AdminAssignmentList(items=items, meta=PageMeta(total=total, limit=limit, offset=offset))
    )


@admin_router.post("/{assignment_id}/confirm", response_model=SuccessResponse[DeliveryAssignmentResponse])
async def confirm_delivery(
    assignment_id: uuid.UUID,
    body: DeliveryConfirm,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = DeliveryService(db)
    assignment = await svc.confirm_delivery(assignment_id, admin.id, body)
    message = "Delivery confirmed successfully" if body.delivered else "Delivery marked as failed"
    return SuccessResponse(data=DeliveryAssignmentResponse.model_validate(assignment), message=message)


# ---------------------------------------------------------------------------
# Farmer
# ---------------------------------------------------------------------------


@farmer_router.get("", response_model=SuccessResponse[list[FarmerAssignmentView]])
async def list_my_deliveries(
    status: AssignmentStatus | None = Query(None),
    upcoming: bool = Query(False),
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = DeliveryService(db)
    criteria = FarmerAssignmentCriteria(
        status=status,
        upcoming_from=svc.clock.now() if upcoming else None,
    )
    return SuccessResponse(data=await svc.list_for_farmer(farmer.id, criteria))


@farmer_router.get("/{assignment_id}", response_model=SuccessResponse[FarmerAssignmentView])
async def get_my_delivery(
    assignment_id: uuid.UUID,
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = DeliveryService(db)
    return SuccessResponse(data=await svc.get_farmer_assignment(farmer.id, assignment_id))
