"""Tests for PerformanceService: persistence, history and trend."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from sqlalchemy import func, select

from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus, PerformanceTier, QualityResult, UserStatus
from farmlink.models.farmer_performance_history import FarmerPerformanceHistory
from farmlink.modules.availability.week import week_start
from farmlink.modules.performance.service import (
    INITIAL_REASON,
    SCHEDULED_REASON,
    PerformanceService,
)
from tests.factories import make_availability, make_buyer, make_farmer, make_order


async def _history_rows(db, farmer_id):
    result = await db.execute(
        select(FarmerPerformanceHistory)
        .where(FarmerPerformanceHistory.farmer_id == farmer_id)
        .order_by(FarmerPerformanceHistory.created_at.asc())
    )
    return list(result.scalars().all())


async def _confirmed_assignment(db, farmer, order, clock, **overrides):
    values = {
        "order_id": order.id,
        "farmer_id": farmer.id,
        "assigned_quantity": 50,
        "delivery_date": order.delivery_date,
        "delivery_address_id": order.delivery_address_id,
        "status": AssignmentStatus.DELIVERED,
        "quantity_delivered": 50,
        "quality_result": QualityResult.PASS,
        "confirmed_at": clock.now(),
    }
    values.update(overrides)
    assignment = DeliveryAssignment(**values)
    db.add(assignment)
    await db.flush()
    return assignment


async def test_first_read_initialises_new_farmer(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = PerformanceService(async_session, clock=clock)

    performance, breakdown = await svc.get_or_initialize(farmer.id)

    assert performance.score == 50
    assert performance.tier == PerformanceTier.STANDARD
    assert breakdown.on_time_delivery_score == 0
    rows = await _history_rows(async_session, farmer.id)
    assert len(rows) == 1
    assert rows[0].reason == INITIAL_REASON
    assert (rows[0].previous_score, rows[0].previous_tier) == (50, PerformanceTier.PROBATIONARY)
    assert (rows[0].new_score, rows[0].new_tier) == (50, PerformanceTier.STANDARD)


async def test_recompute_is_idempotent(async_session, clock):
    farmer = await make_farmer(async_session)
    buyer, address = await make_buyer(async_session)
    order = await make_order(async_session, buyer, address)
    await _confirmed_assignment(async_session, farmer, order, clock)
    svc = PerformanceService(async_session, clock=clock)

    first = await svc.recompute(farmer.id, reason="Delivery confirmed")
    second = await svc.recompute(farmer.id, reason="Delivery confirmed")
    third = await svc.recompute(farmer.id, reason=SCHEDULED_REASON)

    assert first == second == third
    assert first.score == 100
    assert len(await _history_rows(async_session, farmer.id)) == 1


async def test_history_row_only_when_score_changes(async_session, clock):
    farmer = await make_farmer(async_session)
    buyer, address = await make_buyer(async_session)
    order = await make_order(async_session, buyer, address)
    svc = PerformanceService(async_session, clock=clock)
    await svc.get_or_initialize(farmer.id)

    await _confirmed_assignment(
        async_session, farmer, order, clock,
        status=AssignmentStatus.FAILED, quantity_delivered=None, quality_result=None,
    )
    clock.advance(hours=1)
    await svc.recompute(farmer.id, reason="Delivery failed")
    assert len(await _history_rows(async_session, farmer.id)) == 1

    await _confirmed_assignment(async_session, farmer, order, clock, quality_result=QualityResult.PARTIAL)
    clock.advance(hours=1)
    result = await svc.recompute(farmer.id, reason="Delivery confirmed - quality PARTIAL")

    # on-time 50, quantity 100, quality 50, availability 0 -> 50 + 15 + 30 + 12.5 = 107.5
    assert result.score == 100
    rows = await _history_rows(async_session, farmer.id)
    assert len(rows) == 2
    assert rows[-1].previous_score == 50
    assert rows[-1].new_score == 100
    assert rows[-1].new_tier == PerformanceTier.PREFERRED


async def test_pending_assignments_do_not_count(async_session, clock):
    farmer = await make_farmer(async_session)
    buyer, address = await make_buyer(async_session)
    order = await make_order(async_session, buyer, address)
    await _confirmed_assignment(
        async_session, farmer, order, clock,
        status=AssignmentStatus.PENDING, quantity_delivered=None, quality_result=None, confirmed_at=None,
    )
    result = await PerformanceService(async_session, clock=clock).recompute(farmer.id, reason="x")
    assert result.score == 50


async def test_only_last_eight_availability_rows_count(async_session, clock):
    farmer = await make_farmer(async_session)
    monday = week_start(clock.now())
    # Two old late weeks fall outside the window of the eight most recent
    for weeks_back in range(10):
        await make_availability(
            async_session, farmer, monday - timedelta(weeks=weeks_back), is_late=weeks_back >= 8
        )

    result = await PerformanceService(async_session, clock=clock).recompute(farmer.id, reason="x")
    assert result.breakdown.availability_submission_score == 100


async def test_trend_merges_history_with_current_snapshot(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = PerformanceService(async_session, clock=clock)
    await svc.get_or_initialize(farmer.id)
    clock.advance(days=3)

    points = await svc.trend(farmer.id, days=30)

    assert len(points) == 2
    assert points[0].date < points[1].date
    assert points[-1].date == clock.now()
    assert points[-1].score == 50


async def test_history_respects_lookback(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = PerformanceService(async_session, clock=clock)
    await svc.get_or_initialize(farmer.id)

    clock.advance(days=10)
    assert len(await svc.history(farmer.id, days=30)) == 1
    assert await svc.history(farmer.id, days=7) == []


async def test_recompute_all_covers_eligible_farmers_and_survives_failures(async_session, clock):
    active = await make_farmer(async_session, status=UserStatus.ACTIVE)
    probationary = await make_farmer(async_session, status=UserStatus.PROBATIONARY)
    await make_farmer(async_session, status=UserStatus.SUSPENDED)
    svc = PerformanceService(async_session, clock=clock)

    assert await svc.recompute_all() == 2

    real_recompute = PerformanceService.recompute

    async def flaky(self, farmer_id, **kwargs):
        if farmer_id == active.id:
            raise RuntimeError("boom")
        return await real_recompute(self, farmer_id, **kwargs)

    with patch.object(PerformanceService, "recompute", flaky):
        assert await svc.recompute_all() == 1

    count = await async_session.execute(
        select(func.count()).select_from(FarmerPerformanceHistory).where(
            FarmerPerformanceHistory.farmer_id == probationary.id
        )
    )
    assert count.scalar() == 1


def test_thresholds_and_weights_are_exposed():
    assert PerformanceService.tier_thresholds() == {"PROBATIONARY": 0, "STANDARD": 50, "PREFERRED": 85}
    assert PerformanceService.score_weights() == {
        "on_time_delivery": 0.30,
        "quantity_accuracy": 0.30,
        "quality": 0.25,
        "availability_submission": 0.15,
    }
