"""Admin review of farmer applications and buyer registrations, and account status control."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    ApplicationNotFoundException,
    BuyerNotFoundException,
    FarmerNotFoundException,
    InvalidApplicationStatusException,
)
from farmlink.models.buyer import Buyer
from farmlink.models.buyer_registration import BuyerRegistration
from farmlink.models.enums import UserStatus
from farmlink.models.farmer import Farmer
from farmlink.models.farmer_application import FarmerApplication
from farmlink.models.user import User
from farmlink.modules.accounts.constants import (
    BUYER_APPROVED_STATUS,
    FARMER_APPROVED_STATUS,
    REJECTED_STATUS,
)
from farmlink.modules.accounts.criteria import (
    BuyerCriteria,
    BuyerRegistrationCriteria,
    FarmerApplicationCriteria,
    FarmerCriteria,
)

logger = logging.getLogger(__name__)

_VERIFIED_STATUSES = (UserStatus.ACTIVE, UserStatus.PROBATIONARY)


class AdminAccountService:
    def __init__(self, db: AsyncSession, clock: Clock | None = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Farmer applications
    # ------------------------------------------------------------------

    async def list_farmer_applications(
        self, criteria: FarmerApplicationCriteria | None = None
    ) -> list[FarmerApplication]:
        criteria = criteria or FarmerApplicationCriteria()
        query = criteria.apply(select(FarmerApplication)).order_by(FarmerApplication.created_at.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_farmer_application(self, application_id: uuid.UUID) -> FarmerApplication:
        result = await self.db.execute(
            select(FarmerApplication).where(FarmerApplication.id == application_id)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise ApplicationNotFoundException(f"Farmer application {application_id} not found")
        return application

    async def approve_farmer_application(
        self,
        application_id: uuid.UUID,
        admin_id: uuid.UUID,
        admin_notes: str | None = None,
    ) -> FarmerApplication:
        """APPLIED → PROBATIONARY for both the application and the farmer's account."""
        from farmlink.modules.performance.service import PerformanceService

        application = await self.get_farmer_application(application_id)
        if application.status != UserStatus.APPLIED:
            raise InvalidApplicationStatusException(
                f"Cannot approve application with status: {application.status.value}"
            )

        now = self.clock.now()
        async with self.uow.transaction():
            application.status = FARMER_APPROVED_STATUS
            application.reviewed_by = admin_id
            application.reviewed_at = now
            application.admin_notes = admin_notes
            application.rejection_reason = None

            farmer = application.farmer
            farmer.verification_date = now
            farmer.verification_admin_id = admin_id
            farmer.user.status = FARMER_APPROVED_STATUS
            await self.db.flush()

            await PerformanceService(self.db, clock=self.clock).get_or_initialize(farmer.id)

        logger.info("Farmer application %s approved by %s", application_id, admin_id)
        return application

    async def reject_farmer_application(
        self,
        application_id: uuid.UUID,
        admin_id: uuid.UUID,
        rejection_reason: str,
    ) -> FarmerApplication:
        application = await self.get_farmer_application(application_id)
        if application.status != UserStatus.APPLIED:
            raise InvalidApplicationStatusException(
                f"Cannot reject application with status: {application.status.value}"
            )

        async with self.uow.transaction():
            application.status = REJECTED_STATUS
            application.reviewed_by = admin_id
            application.reviewed_at = self.clock.now()
            application.rejection_reason = rejection_reason.strip()
            application.farmer.user.status = REJECTED_STATUS
            await self.db.flush()

        logger.info("Farmer application %s rejected by %s", application_id, admin_id)
        return application

    # ------------------------------------------------------------------
    # Buyer registrations
    # ------------------------------------------------------------------

    async def list_buyer_registrations(
        self, criteria: BuyerRegistrationCriteria | None = None
    ) -> list[BuyerRegistration]:
        criteria = criteria or BuyerRegistrationCriteria()
        query = criteria.apply(select(BuyerRegistration)).order_by(BuyerRegistration.created_at.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_buyer_registration(self, registration_id: uuid.UUID) -> BuyerRegistration:
        result = await self.db.execute(
            select(BuyerRegistration).where(BuyerRegistration.id == registration_id)
        )
        registration = result.scalar_one_or_none()
        if registration is None:
            raise ApplicationNotFoundException(f"Buyer registration {registration_id} not found")
        return registration

    async def approve_buyer_registration(
        self,
        registration_id: uuid.UUID,
        admin_id: uuid.UUID,
        admin_notes: str | None = None,
    ) -> BuyerRegistration:
        registration = await self.get_buyer_registration(registration_id)
        if registration.status != UserStatus.PENDING:
            raise InvalidApplicationStatusException(
                f"Cannot approve registration with status: {registration.status.value}"
            )

        async with self.uow.transaction():
            registration.status = BUYER_APPROVED_STATUS
            registration.reviewed_by = admin_id
            registration.reviewed_at = self.clock.now()
            registration.admin_notes = admin_notes
            registration.rejection_reason = None
            registration.buyer.user.status = BUYER_APPROVED_STATUS
            await self.db.flush()

        logger.info("Buyer registration %s approved by %s", registration_id, admin_id)
        return registration

    async def reject_buyer_registration(
        self,
        registration_id: uuid.UUID,
        admin_id: uuid.UUID,
        rejection_reason: str,
    ) -> BuyerRegistration:
        registration = await self.get_buyer_registration(registration_id)
        if registration.status != UserStatus.PENDING:
            raise InvalidApplicationStatusException(
                f"Cannot reject registration with status: {registration.status.value}"
            )

        async with self.uow.transaction():
            registration.status = REJECTED_STATUS
            registration.reviewed_by = admin_id
            registration.reviewed_at = self.clock.now()
            registration.rejection_reason = rejection_reason.strip()
            registration.buyer.user.status = REJECTED_STATUS
            await self.db.flush()

        logger.info("Buyer registration %s rejected by %s", registration_id, admin_id)
        return registration

    # ------------------------------------------------------------------
    # Directory listings
    # ------------------------------------------------------------------

    async def list_farmers(self, criteria: FarmerCriteria | None = None) -> tuple[list[Farmer], int]:
        criteria = criteria or FarmerCriteria()
        base = criteria.apply(select(Farmer).join(User, Farmer.user_id == User.id))
        count_query = criteria.apply(
            select(func.count()).select_from(Farmer).join(User, Farmer.user_id == User.id)
        )

        total = (await self.db.execute(count_query)).scalar() or 0
        result = await self.db.execute(
            base.order_by(Farmer.created_at.desc()).offset(criteria.offset).limit(criteria.limit)
        )
        return list(result.scalars().all()), total

    async def list_buyers(self, criteria: BuyerCriteria | None = None) -> tuple[list[Buyer], int]:
        criteria = criteria or BuyerCriteria()
        base = criteria.apply(select(Buyer).join(User, Buyer.user_id == User.id))
        count_query = criteria.apply(
            select(func.count()).select_from(Buyer).join(User, Buyer.user_id == User.id)
        )

        total = (await self.db.execute(count_query)).scalar() or 0
        result = await self.db.execute(
            base.order_by(Buyer.created_at.desc()).offset(criteria.offset).limit(criteria.limit)
        )
        return list(result.scalars().all()), total

    # ------------------------------------------------------------------
    # Status control
    # ------------------------------------------------------------------

    async def update_farmer_status(
        self, farmer_id: uuid.UUID, status: UserStatus, admin_id: uuid.UUID
    ) -> Farmer:
        result = await self.db.execute(select(Farmer).where(Farmer.id == farmer_id))
        farmer = result.scalar_one_or_none()
        if farmer is None:
            raise FarmerNotFoundException(f"Farmer {farmer_id} not found")

        previous = farmer.user.status
        farmer.user.status = status
        if status in _VERIFIED_STATUSES:
            farmer.verification_date = self.clock.now()
            farmer.verification_admin_id = admin_id
        await self.db.flush()

        logger.info(
            "Farmer %s status changed %s -> %s by %s",
            farmer_id, previous.value, status.value, admin_id,
        )
        return farmer

    async def update_buyer_status(
        self, buyer_id: uuid.UUID, status: UserStatus, admin_id: uuid.UUID
    ) -> Buyer:
        result = await self.db.execute(select(Buyer).where(Buyer.id == buyer_id))
        buyer = result.scalar_one_or_none()
        if buyer is None:
            raise BuyerNotFoundException(f"Buyer {buyer_id} not found")

        previous = buyer.user.status
        buyer.user.status = status
        await self.db.flush()

        logger.info(
            "Buyer %s status changed %s -> %s by %s",
            buyer_id, previous.value, status.value, admin_id,
        )
        return buyer
