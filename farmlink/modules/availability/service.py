"""Availability ledger: farmers' weekly supply declarations."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock, as_utc
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    DuplicateSubmissionException,
    InvalidQuantityException,
    InvalidReadyDateException,
)
from farmlink.models.weekly_availability import WeeklyAvailability
from farmlink.modules.availability.schemas import AvailabilityCreate
from farmlink.modules.availability.week import is_late_submission, week_start

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


class AvailabilityService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)

    async def submit(self, farmer_id: uuid.UUID, data: AvailabilityCreate) -> WeeklyAvailability:
        """Record this week's availability for one product.

        One submission per (farmer, week, product). Submissions after Tuesday
        are accepted but flagged late.
        """
        now = self.clock.now()
        current_week = week_start(now)
        product_type = data.product_type.strip()

        existing = await self.db.execute(
            select(WeeklyAvailability.id).where(
                WeeklyAvailability.farmer_id == farmer_id,
                WeeklyAvailability.week_start_date == current_week,
                WeeklyAvailability.product_type == product_type,
            )
        )
        if existing.scalars().first() is not None:
            raise DuplicateSubmissionException(
                f"You have already submitted availability for {product_type} this week."
            )

        if data.quantity_available <= 0:
            raise InvalidQuantityException("Quantity available must be greater than 0")
        if as_utc(data.ready_date) <= now:
            raise InvalidReadyDateException("Ready date must be in the future")

        availability = WeeklyAvailability(
            farmer_id=farmer_id,
            week_start_date=current_week,
            product_type=product_type,
            quantity_available=data.quantity_available,
            avg_weight=data.avg_weight,
            ready_date=as_utc(data.ready_date),
            photo_url=data.photo_url,
            is_late=is_late_submission(now),
        )
        try:
            async with self.uow.transaction():
                self.db.add(availability)
                await self.db.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent submission for the same key
            raise DuplicateSubmissionException(
                f"You have already submitted availability for {product_type} this week."
            ) from exc

        logger.info(
            "Farmer %s submitted %d %s for week %s%s",
            farmer_id,
            availability.quantity_available,
            product_type,
            current_week.date().isoformat(),
            " (late)" if availability.is_late else "",
        )
        return availability

    async def for_week(self, farmer_id: uuid.UUID, week: datetime) -> list[WeeklyAvailability]:
        result = await self.db.execute(
            select(WeeklyAvailability)
            .where(
                WeeklyAvailability.farmer_id == farmer_id,
                WeeklyAvailability.week_start_date == week_start(week),
            )
            .order_by(WeeklyAvailability.product_type.asc())
        )
        return list(result.scalars().all())

    async def current_week(self, farmer_id: uuid.UUID) -> list[WeeklyAvailability]:
        return await self.for_week(farmer_id, self.clock.now())

    async def history(self, farmer_id: uuid.UUID, limit: int = DEFAULT_HISTORY_LIMIT) -> list[WeeklyAvailability]:
        result = await self.db.execute(
            select(WeeklyAvailability)
            .where(WeeklyAvailability.farmer_id == farmer_id)
            .order_by(WeeklyAvailability.week_start_date.desc(), WeeklyAvailability.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
