"""Admin allocation API router."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.allocation.schemas import (
    AllocationCreate,
    AllocationOverview,
    AllocationResult,
    AssignmentResponse,
    AssignmentUpdate,
)
from farmlink.modules.allocation.service import AllocationService
from farmlink.schemas.responses import SuccessResponse

router = APIRouter(prefix="/admin/allocations", tags=["admin"])


@router.get("", response_model=SuccessResponse[AllocationOverview])
async def allocation_overview(
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AllocationService(db)
    return SuccessResponse(data=await svc.allocation_overview())


@router.post("", response_model=SuccessResponse[AllocationResult], status_code=201)
async def allocate(
    body: AllocationCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AllocationService(db)
    result = await svc.allocate(body.order_id, body.assignments, admin_id=admin.id)
    return SuccessResponse(
        data=result,
        message=f"Created {len(result.assignments)} delivery assignments",
    )


@router.put("/{assignment_id}", response_model=SuccessResponse[AssignmentResponse])
async def update_assignment(
    assignment_id: uuid.UUID,
    body: AssignmentUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AllocationService(db)
    assignment = await svc.update_assignment(assignment_id, body.assigned_quantity, admin_id=admin.id)
    return SuccessResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment updated successfully",
    )


@router.delete("/{assignment_id}", response_model=SuccessResponse[None])
async def delete_assignment(
    assignment_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AllocationService(db)
    await svc.delete_assignment(assignment_id, admin_id=admin.id)
    return SuccessResponse(data=None, message="Assignment deleted successfully")
