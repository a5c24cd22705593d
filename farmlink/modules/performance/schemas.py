"""Pydantic v2 schemas for farmer performance views."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from farmlink.models.enums import PerformanceTier


class PerformanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    farmer_id: uuid.UUID
    score: int
    tier: PerformanceTier
    updated_at: datetime | None = None


class BreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    on_time_delivery_score: int
    quantity_accuracy_score: int
    quality_score: int
    availability_submission_score: int


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    previous_score: int
    new_score: int
    previous_tier: PerformanceTier
    new_tier: PerformanceTier
    reason: str
    delivery_assignment_id: uuid.UUID | None = None
    created_at: datetime


class NextTierProgress(BaseModel):
    current_score: int
    next_tier_threshold: int
    points_needed: int
    next_tier_name: str


class PerformanceOverview(BaseModel):
    performance: PerformanceResponse
    breakdown: BreakdownResponse
    tier_thresholds: dict[str, int]
    score_weights: dict[str, float]
    recent_changes: list[HistoryEntryResponse]
    next_tier_progress: NextTierProgress


class TrendPointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    score: int
    tier: PerformanceTier
