"""Tests for AvailabilityService and week arithmetic."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from farmlink.exceptions import (
    DuplicateSubmissionException,
    InvalidQuantityException,
    InvalidReadyDateException,
)
from farmlink.modules.availability.schemas import AvailabilityCreate
from farmlink.modules.availability.service import AvailabilityService
from farmlink.modules.availability.week import is_late_submission, week_end, week_start
from tests.factories import make_farmer

WEDNESDAY = datetime(2024, 1, 10, 15, 30, tzinfo=UTC)


def _submission(clock, product_type="Broilers", quantity=120, ready_in_days=3):
    return AvailabilityCreate(
        product_type=product_type,
        quantity_available=quantity,
        ready_date=clock.now() + timedelta(days=ready_in_days),
    )


def test_week_boundaries():
    assert week_start(WEDNESDAY) == datetime(2024, 1, 8, tzinfo=UTC)
    assert week_end(WEDNESDAY) == datetime(2024, 1, 14, 23, 59, 59, 999999, tzinfo=UTC)


@pytest.mark.parametrize(
    ("moment", "late"),
    [
        (datetime(2024, 1, 8, 0, 0, tzinfo=UTC), False),
        (datetime(2024, 1, 9, 23, 59, tzinfo=UTC), False),
        (datetime(2024, 1, 10, 0, 0, tzinfo=UTC), True),
        (datetime(2024, 1, 14, 12, 0, tzinfo=UTC), True),
    ],
)
def test_submission_window_is_monday_and_tuesday(moment, late):
    assert is_late_submission(moment) is late


async def test_submit_inside_window(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = AvailabilityService(async_session, clock=clock)

    row = await svc.submit(farmer.id, _submission(clock, product_type="  Broilers "))

    assert row.is_late is False
    assert row.product_type == "Broilers"
    assert row.week_start_date == datetime(2024, 1, 8, tzinfo=UTC)


async def test_wednesday_submission_is_accepted_but_late(async_session, clock):
    farmer = await make_farmer(async_session)
    clock.set_time(WEDNESDAY)
    svc = AvailabilityService(async_session, clock=clock)

    row = await svc.submit(farmer.id, _submission(clock))

    assert row.is_late is True
    assert row.week_start_date == datetime(2024, 1, 8, tzinfo=UTC)


async def test_duplicate_product_in_same_week_is_rejected(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = AvailabilityService(async_session, clock=clock)
    await svc.submit(farmer.id, _submission(clock))

    with pytest.raises(DuplicateSubmissionException):
        await svc.submit(farmer.id, _submission(clock, quantity=5))

    # A different product, or the same product next week, is fine
    await svc.submit(farmer.id, _submission(clock, product_type="Layers"))
    clock.advance(days=7)
    await svc.submit(farmer.id, _submission(clock))
    assert len(await svc.history(farmer.id)) == 3


async def test_duplicate_is_checked_before_quantity(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = AvailabilityService(async_session, clock=clock)
    await svc.submit(farmer.id, _submission(clock))

    with pytest.raises(DuplicateSubmissionException):
        await svc.submit(farmer.id, _submission(clock, quantity=0))


async def test_quantity_and_ready_date_validation(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = AvailabilityService(async_session, clock=clock)

    with pytest.raises(InvalidQuantityException):
        await svc.submit(farmer.id, _submission(clock, quantity=0))
    with pytest.raises(InvalidReadyDateException):
        await svc.submit(farmer.id, _submission(clock, ready_in_days=0))


async def test_current_week_and_history(async_session, clock):
    farmer = await make_farmer(async_session)
    svc = AvailabilityService(async_session, clock=clock)
    await svc.submit(farmer.id, _submission(clock, product_type="Layers"))
    await svc.submit(farmer.id, _submission(clock, product_type="Broilers"))
    clock.advance(days=7)
    await svc.submit(farmer.id, _submission(clock, product_type="Broilers"))

    current = await svc.current_week(farmer.id)
    assert [r.product_type for r in current] == ["Broilers"]

    history = await svc.history(farmer.id, limit=2)
    assert len(history) == 2
    assert history[0].week_start_date >= history[1].week_start_date
