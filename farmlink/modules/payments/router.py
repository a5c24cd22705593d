"""Payment API routers: admin ledger entry/reporting and the farmer's read-only view."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.enums import PaymentStatus
from farmlink.models.farmer import Farmer
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.accounts.profiles import current_farmer
from farmlink.modules.payments.criteria import PaymentReportCriteria
from farmlink.modules.payments.schemas import (
    Balance,
    FarmerPayments,
    PaymentCreate,
    PaymentReport,
    PaymentResponse,
)
from farmlink.modules.payments.service import PaymentService
from farmlink.schemas.responses import SuccessResponse

admin_router = APIRouter(prefix="/admin/payments", tags=["admin"])
farmer_router = APIRouter(prefix="/farmers/payments", tags=["payments"])


@admin_router.post("", response_model=SuccessResponse[PaymentResponse], status_code=201)
async def record_payment(
    body: PaymentCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = PaymentService(db)
    payment = await svc.record_payment(admin.id, body)
    return SuccessResponse(
        data=PaymentResponse.model_validate(payment),
        message="Payment recorded successfully",
    )


@admin_router.get("", response_model=SuccessResponse[PaymentReport])
async def payment_report(
    farmer_id: uuid.UUID | None = Query(None),
    status: PaymentStatus | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    svc = PaymentService(db)
    criteria = PaymentReportCriteria(
        farmer_id=farmer_id, status=status, date_from=date_from, date_to=date_to
    )
    return SuccessResponse(data=await svc.report(criteria))


@farmer_router.get("", response_model=SuccessResponse[FarmerPayments])
async def my_payments(
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = PaymentService(db)
    payments, balance = await svc.farmer_payments(farmer.id)
    return SuccessResponse(
        data=FarmerPayments(
            payments=[PaymentResponse.model_validate(p) for p in payments],
            balance=balance,
        )
    )


@farmer_router.get("/balance", response_model=SuccessResponse[Balance])
async def my_balance(
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = PaymentService(db)
    return SuccessResponse(data=await svc.balance(farmer.id))
