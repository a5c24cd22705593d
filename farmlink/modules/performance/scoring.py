"""Pure scoring functions for farmer performance.

Every function here takes plain records and returns integers in [0, 100];
nothing touches the database, so the whole score is a deterministic
function of its inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from farmlink.clock import as_utc
from farmlink.models.enums import AssignmentStatus, PerformanceTier, QualityResult

BASE_SCORE = 50

SCORE_WEIGHTS: dict[str, Decimal] = {
    "on_time_delivery": Decimal("0.30"),
    "quantity_accuracy": Decimal("0.30"),
    "quality": Decimal("0.25"),
    "availability_submission": Decimal("0.15"),
}

# Inclusive lower bounds, highest first
TIER_THRESHOLDS: dict[PerformanceTier, int] = {
    PerformanceTier.PREFERRED: 85,
    PerformanceTier.STANDARD: 50,
    PerformanceTier.PROBATIONARY: 0,
}

# Lateness is counted in whole days
ON_TIME_GRACE_DAYS = 1
AVAILABILITY_WINDOW_WEEKS = 8

QUALITY_POINTS: dict[QualityResult, int] = {
    QualityResult.PASS: 100,
    QualityResult.PARTIAL: 50,
    QualityResult.FAIL: 0,
}


class ConfirmedDelivery(Protocol):
    status: AssignmentStatus
    assigned_quantity: int
    quantity_delivered: int | None
    quality_result: QualityResult | None
    delivery_date: datetime
    confirmed_at: datetime | None


class AvailabilityRecord(Protocol):
    is_late: bool


@dataclass(frozen=True)
class ScoreBreakdown:
    on_time_delivery_score: int
    quantity_accuracy_score: int
    quality_score: int
    availability_submission_score: int


@dataclass(frozen=True)
class PerformanceResult:
    score: int
    tier: PerformanceTier
    breakdown: ScoreBreakdown


def round_half_up(value: Decimal | float | int) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _percentage(part: int, whole: int) -> int:
    return round_half_up(Decimal(part) * 100 / Decimal(whole))


def _delivered(deliveries: Iterable[ConfirmedDelivery]) -> list[ConfirmedDelivery]:
    return [d for d in deliveries if d.status == AssignmentStatus.DELIVERED]


def on_time_score(deliveries: Sequence[ConfirmedDelivery]) -> int:
    """Share of confirmed assignments at most one whole day late.

    FAILED assignments count against the farmer.
    """
    if not deliveries:
        return 0
    on_time = sum(
        1
        for d in _delivered(deliveries)
        if d.confirmed_at is not None
        and (as_utc(d.confirmed_at) - as_utc(d.delivery_date)) // timedelta(days=1) <= ON_TIME_GRACE_DAYS
    )
    return _percentage(on_time, len(deliveries))


def quantity_accuracy_score(deliveries: Sequence[ConfirmedDelivery]) -> int:
    measured = [d for d in _delivered(deliveries) if d.quantity_delivered is not None]
    if not measured:
        return 0
    total = sum(
        min(Decimal(100), Decimal(d.quantity_delivered) * 100 / Decimal(d.assigned_quantity))
        for d in measured
    )
    return round_half_up(total / len(measured))


def quality_score(deliveries: Sequence[ConfirmedDelivery]) -> int:
    graded = [d for d in _delivered(deliveries) if d.quality_result is not None]
    if not graded:
        return 0
    total = sum(QUALITY_POINTS[d.quality_result] for d in graded)
    return round_half_up(Decimal(total) / len(graded))


def availability_submission_score(submissions: Sequence[AvailabilityRecord]) -> int:
    """Share of the given availability rows submitted inside the Monday-Tuesday window."""
    if not submissions:
        return 0
    on_time = sum(1 for s in submissions if not s.is_late)
    return _percentage(on_time, len(submissions))


def aggregate_score(breakdown: ScoreBreakdown) -> int:
    weighted = (
        BASE_SCORE
        + SCORE_WEIGHTS["on_time_delivery"] * breakdown.on_time_delivery_score
        + SCORE_WEIGHTS["quantity_accuracy"] * breakdown.quantity_accuracy_score
        + SCORE_WEIGHTS["quality"] * breakdown.quality_score
        + SCORE_WEIGHTS["availability_submission"] * breakdown.availability_submission_score
    )
    return max(0, min(100, round_half_up(weighted)))


def tier_for_score(score: int) -> PerformanceTier:
    for tier, threshold in TIER_THRESHOLDS.items():
        if score >= threshold:
            return tier
    return PerformanceTier.PROBATIONARY


def compute_performance(
    deliveries: Sequence[ConfirmedDelivery],
    submissions: Sequence[AvailabilityRecord],
) -> PerformanceResult:
    breakdown = ScoreBreakdown(
        on_time_delivery_score=on_time_score(deliveries),
        quantity_accuracy_score=quantity_accuracy_score(deliveries),
        quality_score=quality_score(deliveries),
        availability_submission_score=availability_submission_score(submissions),
    )
    score = aggregate_score(breakdown)
    return PerformanceResult(score=score, tier=tier_for_score(score), breakdown=breakdown)


def next_tier_progress(score: int) -> dict[str, int | str]:
    """How far ``score`` is from the next tier up."""
    for tier in (PerformanceTier.STANDARD, PerformanceTier.PREFERRED):
        threshold = TIER_THRESHOLDS[tier]
        if score < threshold:
            return {
                "current_score": score,
                "next_tier_threshold": threshold,
                "points_needed": max(0, threshold - score),
                "next_tier_name": tier.value,
            }
    return {
        "current_score": score,
        "next_tier_threshold": 100,
        "points_needed": 0,
        "next_tier_name": "MAX",
    }
