"""Farmer performance API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.database.session import get_db
from farmlink.models.farmer import Farmer
from farmlink.modules.accounts.profiles import current_farmer
from farmlink.modules.performance.schemas import (
    BreakdownResponse,
    HistoryEntryResponse,
    NextTierProgress,
    PerformanceOverview,
    PerformanceResponse,
    TrendPointResponse,
)
from farmlink.modules.performance.scoring import next_tier_progress
from farmlink.modules.performance.service import DEFAULT_LOOKBACK_DAYS, PerformanceService
from farmlink.schemas.responses import SuccessResponse

router = APIRouter(prefix="/farmers/performance", tags=["performance"])


@router.get("", response_model=SuccessResponse[PerformanceOverview])
async def get_performance(
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = PerformanceService(db)
    performance, breakdown = await svc.get_or_initialize(farmer.id)
    recent = await svc.recent_changes(farmer.id)
    return SuccessResponse(
        data=PerformanceOverview(
            performance=PerformanceResponse.model_validate(performance),
            breakdown=BreakdownResponse.model_validate(breakdown),
            tier_thresholds=svc.tier_thresholds(),
            score_weights=svc.score_weights(),
            recent_changes=[HistoryEntryResponse.model_validate(h) for h in recent],
            next_tier_progress=NextTierProgress(**next_tier_progress(performance.score)),
        )
    )


@router.get("/history", response_model=SuccessResponse[list[HistoryEntryResponse]])
async def get_performance_history(
    days: int = Query(DEFAULT_LOOKBACK_DAYS, ge=1, le=365),
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = PerformanceService(db)
    history = await svc.history(farmer.id, days=days)
    return SuccessResponse(data=[HistoryEntryResponse.model_validate(h) for h in history])


@router.get("/trend", response_model=SuccessResponse[list[TrendPointResponse]])
async def get_performance_trend(
    days: int = Query(DEFAULT_LOOKBACK_DAYS, ge=1, le=365),
    farmer: Farmer = Depends(current_farmer),
    db: AsyncSession = Depends(get_db),
):
    svc = PerformanceService(db)
    points = await svc.trend(farmer.id, days=days)
    return SuccessResponse(data=[TrendPointResponse.model_validate(p) for p in points])
