"""Admin account API router: application review, directories and status control."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.enums import BuyerType, UserStatus
from farmlink.modules.accounts.admin_service import AdminAccountService
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.accounts.criteria import (
    BuyerCriteria,
    BuyerRegistrationCriteria,
    FarmerApplicationCriteria,
    FarmerCriteria,
)
from farmlink.modules.accounts.schemas import (
    BuyerListResponse,
    BuyerRegistrationResponse,
    BuyerResponse,
    FarmerApplicationResponse,
    FarmerListResponse,
    FarmerResponse,
    ReviewApprove,
    ReviewReject,
    StatusUpdate,
)
from farmlink.schemas.responses import PageMeta, SuccessResponse

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Farmer applications
# ---------------------------------------------------------------------------


@router.get("/farmers/applications", response_model=SuccessResponse[list[FarmerApplicationResponse]])
async def list_farmer_applications(
    status: UserStatus | None = Query(UserStatus.APPLIED),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    applications = await svc.list_farmer_applications(FarmerApplicationCriteria(status=status))
    return SuccessResponse(data=[FarmerApplicationResponse.model_validate(a) for a in applications])


@router.get("/farmers/applications/{application_id}", response_model=SuccessResponse[FarmerApplicationResponse])
async def get_farmer_application(
    application_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    application = await svc.get_farmer_application(application_id)
    return SuccessResponse(data=FarmerApplicationResponse.model_validate(application))


@router.post(
    "/farmers/applications/{application_id}/approve",
    response_model=SuccessResponse[FarmerApplicationResponse],
)
async def approve_farmer_application(
    application_id: uuid.UUID,
    body: ReviewApprove,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    application = await svc.approve_farmer_application(application_id, admin.id, body.admin_notes)
    return SuccessResponse(
        data=FarmerApplicationResponse.model_validate(application),
        message="Farmer application approved",
    )


@router.post(
    "/farmers/applications/{application_id}/reject",
    response_model=SuccessResponse[FarmerApplicationResponse],
)
async def reject_farmer_application(
    application_id: uuid.UUID,
    body: ReviewReject,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    application = await svc.reject_farmer_application(application_id, admin.id, body.rejection_reason)
    return SuccessResponse(
        data=FarmerApplicationResponse.model_validate(application),
        message="Farmer application rejected",
    )


# ---------------------------------------------------------------------------
# Buyer registrations
# ---------------------------------------------------------------------------


@router.get("/buyers/registrations", response_model=SuccessResponse[list[BuyerRegistrationResponse]])
async def list_buyer_registrations(
    status: UserStatus | None = Query(UserStatus.PENDING),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    registrations = await svc.list_buyer_registrations(BuyerRegistrationCriteria(status=status))
    return SuccessResponse(data=[BuyerRegistrationResponse.model_validate(r) for r in registrations])


@router.get("/buyers/registrations/{registration_id}", response_model=SuccessResponse[BuyerRegistrationResponse])
async def get_buyer_registration(
    registration_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    registration = await svc.get_buyer_registration(registration_id)
    return SuccessResponse(data=BuyerRegistrationResponse.model_validate(registration))


@router.post(
    "/buyers/registrations/{registration_id}/approve",
    response_model=SuccessResponse[BuyerRegistrationResponse],
)
async def approve_buyer_registration(
    registration_id: uuid.UUID,
    body: ReviewApprove,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    registration = await svc.approve_buyer_registration(registration_id, admin.id, body.admin_notes)
    return SuccessResponse(
        data=BuyerRegistrationResponse.model_validate(registration),
        message="Buyer registration approved",
    )


@router.post(
    "/buyers/registrations/{registration_id}/reject",
    response_model=SuccessResponse[BuyerRegistrationResponse],
)
async def reject_buyer_registration(
    registration_id: uuid.UUID,
    body: ReviewReject,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    registration = await svc.reject_buyer_registration(registration_id, admin.id, body.rejection_reason)
    return SuccessResponse(
        data=BuyerRegistrationResponse.model_validate(registration),
        message="Buyer registration rejected",
    )


# ---------------------------------------------------------------------------
# Directories and status control
# ---------------------------------------------------------------------------


@router.get("/farmers", response_model=SuccessResponse[FarmerListResponse])
async def list_farmers(
    status: UserStatus | None = Query(None),
    region: str | None = Query(None),
    produce_category: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    criteria = FarmerCriteria(
        status=status, region=region, produce_category=produce_category, limit=limit, offset=offset
    )
    farmers, total = await svc.list_farmers(criteria)
    return SuccessResponse(
        data=FarmerListResponse(
            items=[FarmerResponse.model_validate(f) for f in farmers],
            meta=PageMeta(total=total, limit=limit, offset=offset),
        )
    )


@router.put("/farmers/{farmer_id}/status", response_model=SuccessResponse[FarmerResponse])
async def update_farmer_status(
    farmer_id: uuid.UUID,
    body: StatusUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    farmer = await svc.update_farmer_status(farmer_id, body.status, admin.id)
    return SuccessResponse(data=FarmerResponse.model_validate(farmer), message="Farmer status updated")


@router.get("/buyers", response_model=SuccessResponse[BuyerListResponse])
async def list_buyers(
    status: UserStatus | None = Query(None),
    buyer_type: BuyerType | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    criteria = BuyerCriteria(status=status, buyer_type=buyer_type, limit=limit, offset=offset)
    buyers, total = await svc.list_buyers(criteria)
    return SuccessResponse(
        data=BuyerListResponse(
            items=[BuyerResponse.model_validate(b) for b in buyers],
            meta=PageMeta(total=total, limit=limit, offset=offset),
        )
    )


@router.put("/buyers/{buyer_id}/status", response_model=SuccessResponse[BuyerResponse])
async def update_buyer_status(
    buyer_id: uuid.UUID,
    body: StatusUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = AdminAccountService(db)
    buyer = await svc.update_buyer_status(buyer_id, body.status, admin.id)
    return SuccessResponse(data=BuyerResponse.model_validate(buyer), message="Buyer status updated")
