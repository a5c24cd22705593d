"""Farmer availability API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.farmer import Farmer
from farmlink.modules.accounts.profiles import current_farmer
from farmlink.modules.availability.schemas import (
    AvailabilityCreate,
    AvailabilityResponse,
    CurrentWeekResponse,
)
from farmlink.modules.availability.service import DEFAULT_HISTORY_LIMIT, AvailabilityService
from farmlink.modules.availability.week import is_late_submission, week_end, week_start
from farmlink.schemas.responses import SuccessResponse

router = APIRouter(prefix="/farmers", tags=["availability"])


@router.post("/availability", response_model=SuccessResponse[AvailabilityResponse], status_code=201)
async def submit_availability(
    body: AvailabilityCreate,
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = AvailabilityService(db)
    availability = await svc.submit(farmer.id, body)
    message = "Availability submitted successfully"
    if availability.is_late:
        message += ". Note: this submission is outside the Monday-Tuesday window and is marked late."
    return SuccessResponse(data=AvailabilityResponse.model_validate(availability), message=message)


@router.get("/availability", response_model=SuccessResponse[list[AvailabilityResponse]])
async def availability_history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=100),
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = AvailabilityService(db)
    rows = await svc.history(farmer.id, limit=limit)
    return SuccessResponse(data=[AvailabilityResponse.model_validate(r) for r in rows])


@router.get("/availability/current", response_model=SuccessResponse[CurrentWeekResponse])
async def current_week_availability(
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = AvailabilityService(db)
    now = svc.clock.now()
    rows = await svc.current_week(farmer.id)
    return SuccessResponse(
        data=CurrentWeekResponse(
            week_start_date=week_start(now),
            week_end_date=week_end(now),
            submission_window_open=not is_late_submission(now),
            submissions=[AvailabilityResponse.model_validate(r) for r in rows],
        )
    )
