"""Performance scoring service: persists derived scores, breakdowns and change history."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock, as_utc
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus, PerformanceTier
from farmlink.models.farmer import Farmer
from farmlink.models.farmer_performance import FarmerPerformance
from farmlink.models.farmer_performance_breakdown import FarmerPerformanceBreakdown
from farmlink.models.farmer_performance_history import FarmerPerformanceHistory
from farmlink.models.user import User
from farmlink.models.weekly_availability import WeeklyAvailability
from farmlink.modules.orders.constants import ELIGIBLE_FARMER_STATUSES
from farmlink.modules.performance.scoring import (
    AVAILABILITY_WINDOW_WEEKS,
    BASE_SCORE,
    SCORE_WEIGHTS,
    TIER_THRESHOLDS,
    PerformanceResult,
    compute_performance,
)

logger = logging.getLogger(__name__)

INITIAL_REASON = "Initial performance calculation"
SCHEDULED_REASON = "Scheduled recalculation"
DEFAULT_LOOKBACK_DAYS = 30
DEFAULT_RECENT_CHANGES = 10

# Stand-in for a farmer that has never been scored
_UNSCORED = (BASE_SCORE, PerformanceTier.PROBATIONARY)


@dataclass(frozen=True)
class TrendPoint:
    date: datetime
    score: int
    tier: PerformanceTier


class PerformanceService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _stored(
        self, farmer_id: uuid.UUID
    ) -> tuple[FarmerPerformance | None, FarmerPerformanceBreakdown | None]:
        perf = await self.db.execute(
            select(FarmerPerformance).where(FarmerPerformance.farmer_id == farmer_id)
        )
        breakdown = await self.db.execute(
            select(FarmerPerformanceBreakdown).where(FarmerPerformanceBreakdown.farmer_id == farmer_id)
        )
        return perf.scalar_one_or_none(), breakdown.scalar_one_or_none()

    async def _inputs(
        self, farmer_id: uuid.UUID
    ) -> tuple[list[DeliveryAssignment], list[WeeklyAvailability]]:
        deliveries = await self.db.execute(
            select(DeliveryAssignment)
            .where(
                DeliveryAssignment.farmer_id == farmer_id,
                DeliveryAssignment.status.in_([AssignmentStatus.DELIVERED, AssignmentStatus.FAILED]),
                DeliveryAssignment.confirmed_at.is_not(None),
            )
            .order_by(DeliveryAssignment.confirmed_at.desc())
        )
        submissions = await self.db.execute(
            select(WeeklyAvailability)
            .where(WeeklyAvailability.farmer_id == farmer_id)
            .order_by(WeeklyAvailability.week_start_date.desc(), WeeklyAvailability.created_at.desc())
            .limit(AVAILABILITY_WINDOW_WEEKS)
        )
        return list(deliveries.scalars().all()), list(submissions.scalars().all())

    async def get_or_initialize(
        self, farmer_id: uuid.UUID
    ) -> tuple[FarmerPerformance, FarmerPerformanceBreakdown]:
        performance, breakdown = await self._stored(farmer_id)
        if performance is None or breakdown is None:
            await self.recompute(farmer_id, reason=INITIAL_REASON)
            performance, breakdown = await self._stored(farmer_id)
        return performance, breakdown

    async def history(
        self, farmer_id: uuid.UUID, days: int = DEFAULT_LOOKBACK_DAYS
    ) -> list[FarmerPerformanceHistory]:
        since = self.clock.now() - timedelta(days=days)
        result = await self.db.execute(
            select(FarmerPerformanceHistory)
            .where(
                FarmerPerformanceHistory.farmer_id == farmer_id,
                FarmerPerformanceHistory.created_at >= since,
            )
            .order_by(FarmerPerformanceHistory.created_at.desc())
        )
        return list(result.scalars().all())

    async def recent_changes(
        self, farmer_id: uuid.UUID, limit: int = DEFAULT_RECENT_CHANGES
    ) -> list[FarmerPerformanceHistory]:
        result = await self.db.execute(
            select(FarmerPerformanceHistory)
            .where(FarmerPerformanceHistory.farmer_id == farmer_id)
            .order_by(FarmerPerformanceHistory.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def trend(self, farmer_id: uuid.UUID, days: int = DEFAULT_LOOKBACK_DAYS) -> list[TrendPoint]:
        """History points in the window plus the current score, oldest first. For charting only."""
        points = [
            TrendPoint(date=as_utc(entry.created_at), score=entry.new_score, tier=entry.new_tier)
            for entry in await self.history(farmer_id, days)
        ]
        current, _ = await self._stored(farmer_id)
        if current is not None:
            points.append(TrendPoint(date=self.clock.now(), score=current.score, tier=current.tier))
        points.sort(key=lambda p: p.date)
        return points

    @staticmethod
    def tier_thresholds() -> dict[str, int]:
        return {tier.value: threshold for tier, threshold in reversed(TIER_THRESHOLDS.items())}

    @staticmethod
    def score_weights() -> dict[str, float]:
        return {name: float(weight) for name, weight in SCORE_WEIGHTS.items()}

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    async def recompute(
        self,
        farmer_id: uuid.UUID,
        reason: str,
        delivery_assignment_id: uuid.UUID | None = None,
        created_by: uuid.UUID | None = None,
    ) -> PerformanceResult:
        """Recalculate and store the farmer's score.

        Score and breakdown are always overwritten; a history row is only
        appended when the score or tier actually changed, so repeated calls
        on unchanged data are no-ops.
        """
        deliveries, submissions = await self._inputs(farmer_id)
        result = compute_performance(deliveries, submissions)

        performance, breakdown = await self._stored(farmer_id)
        previous_score, previous_tier = (
            (performance.score, performance.tier) if performance is not None else _UNSCORED
        )

        if performance is None:
            performance = FarmerPerformance(farmer_id=farmer_id, score=result.score, tier=result.tier)
            self.db.add(performance)
        else:
            performance.score = result.score
            performance.tier = result.tier

        if breakdown is None:
            breakdown = FarmerPerformanceBreakdown(farmer_id=farmer_id)
            self.db.add(breakdown)
        breakdown.on_time_delivery_score = result.breakdown.on_time_delivery_score
        breakdown.quantity_accuracy_score = result.breakdown.quantity_accuracy_score
        breakdown.quality_score = result.breakdown.quality_score
        breakdown.availability_submission_score = result.breakdown.availability_submission_score

        if (previous_score, previous_tier) != (result.score, result.tier):
            self.db.add(
                FarmerPerformanceHistory(
                    farmer_id=farmer_id,
                    previous_score=previous_score,
                    new_score=result.score,
                    previous_tier=previous_tier,
                    new_tier=result.tier,
                    reason=reason,
                    delivery_assignment_id=delivery_assignment_id,
                    created_by=created_by,
                    created_at=self.clock.now(),
                )
            )
            logger.info(
                "Farmer %s performance %d/%s -> %d/%s (%s)",
                farmer_id, previous_score, previous_tier.value, result.score, result.tier.value, reason,
            )

        await self.db.flush()
        return result

    async def recompute_all(self, reason: str = SCHEDULED_REASON) -> int:
        """Recompute every eligible farmer, each in its own savepoint."""
        result = await self.db.execute(
            select(Farmer.id)
            .join(User, Farmer.user_id == User.id)
            .where(User.status.in_(ELIGIBLE_FARMER_STATUSES))
        )
        farmer_ids = list(result.scalars().all())

        updated = 0
        for farmer_id in farmer_ids:
            try:
                async with self.uow.transaction():
                    await self.recompute(farmer_id, reason=reason)
                updated += 1
            except Exception:
                logger.exception("Performance recompute failed for farmer %s", farmer_id)
        logger.info("Recomputed performance for %d/%d farmers", updated, len(farmer_ids))
        return updated
