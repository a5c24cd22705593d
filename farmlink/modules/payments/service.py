"""Payment reconciliation: owed/paid balances and the offline payment ledger.

Balances are never stored: what a farmer is owed is derived from their
DELIVERED assignments at read time, and what they have been paid is the
sum of the ledger.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.config import settings
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    AssignmentNotFoundException,
    FarmerNotFoundException,
    InvalidAmountException,
)
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus, PaymentStatus
from farmlink.models.farmer import Farmer
from farmlink.models.payment import Payment
from farmlink.modules.payments.criteria import PaymentReportCriteria
from farmlink.modules.payments.schemas import (
    Balance,
    PaymentCreate,
    PaymentReport,
    PaymentResponse,
    ReportEntry,
    ReportSummary,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def payment_status_for(total_owed: Decimal, total_paid: Decimal) -> PaymentStatus:
    if total_paid >= total_owed:
        return PaymentStatus.PAID
    if total_paid > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.NOT_PAID


class PaymentService:
    def __init__(self, db: AsyncSession, unit_price: int | None = None):
        self.db = db
        self.unit_price = Decimal(
            unit_price if unit_price is not None else settings.unit_price_placeholder
        )
        self.uow = UnitOfWork(db)

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    async def amount_owed(self, farmer_id: uuid.UUID) -> tuple[Decimal, int]:
        """Total owed for DELIVERED assignments, and how many there are."""
        result = await self.db.execute(
            select(
                func.coalesce(func.sum(DeliveryAssignment.assigned_quantity), 0),
                func.count(DeliveryAssignment.id),
            ).where(
                DeliveryAssignment.farmer_id == farmer_id,
                DeliveryAssignment.status == AssignmentStatus.DELIVERED,
            )
        )
        quantity, delivered = result.one()
        return Decimal(quantity) * self.unit_price, int(delivered)

    async def amount_paid(self, farmer_id: uuid.UUID) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Payment.amount_paid), 0)).where(
                Payment.farmer_id == farmer_id
            )
        )
        return Decimal(result.scalar() or 0)

    async def balance(self, farmer_id: uuid.UUID) -> Balance:
        total_owed, delivered = await self.amount_owed(farmer_id)
        total_paid = await self.amount_paid(farmer_id)
        return Balance(
            total_owed=total_owed,
            total_paid=total_paid,
            outstanding=total_owed - total_paid,
            delivered_assignments=delivered,
        )

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    async def record_payment(self, admin_id: uuid.UUID, data: PaymentCreate) -> Payment:
        """Append an offline payment to the farmer's ledger.

        ``amount_owed`` on the row is what was outstanding just before this
        payment; the status reflects the cumulative total including it.
        """
        async with self.uow.transaction():
            # Locking the farmer serialises concurrent payments to the same farmer
            farmer = await self.uow.get_for_update(Farmer, data.farmer_id)
            if farmer is None:
                raise FarmerNotFoundException("Farmer not found")

            if data.delivery_assignment_id is not None:
                result = await self.db.execute(
                    select(DeliveryAssignment.id).where(
                        DeliveryAssignment.id == data.delivery_assignment_id,
                        DeliveryAssignment.farmer_id == farmer.id,
                    )
                )
                if result.scalar_one_or_none() is None:
                    raise AssignmentNotFoundException(
                        "Delivery assignment not found or does not belong to this farmer"
                    )

            if data.amount_paid <= 0:
                raise InvalidAmountException("Payment amount must be greater than 0")

            total_owed, _ = await self.amount_owed(farmer.id)
            paid_before = await self.amount_paid(farmer.id)

            payment = Payment(
                farmer_id=farmer.id,
                delivery_assignment_id=data.delivery_assignment_id,
                amount_owed=total_owed - paid_before,
                amount_paid=data.amount_paid,
                payment_status=payment_status_for(total_owed, paid_before + data.amount_paid),
                payment_method=data.payment_method,
                payment_date=data.payment_date,
                recorded_by=admin_id,
                notes=data.notes.strip() if data.notes else None,
            )
            self.db.add(payment)
            await self.db.flush()

        logger.info(
            "Payment %s recorded for farmer %s: %s via %s (%s) by %s",
            payment.id,
            farmer.id,
            data.amount_paid,
            data.payment_method.value,
            payment.payment_status.value,
            admin_id,
        )
        return payment

    async def farmer_payments(self, farmer_id: uuid.UUID) -> tuple[list[Payment], Balance]:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.farmer_id == farmer_id)
            .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        )
        return list(result.scalars().all()), await self.balance(farmer_id)

    async def report(self, criteria: PaymentReportCriteria | None = None) -> PaymentReport:
        criteria = criteria or PaymentReportCriteria()
        result = await self.db.execute(
            criteria.apply(
                select(Payment, Farmer.full_name).join(Farmer, Payment.farmer_id == Farmer.id)
            ).order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        )
        entries = [
            ReportEntry(
                **PaymentResponse.model_validate(payment).model_dump(),
                farmer_name=farmer_name,
            )
            for payment, farmer_name in result.all()
        ]

        total_paid = sum((e.amount_paid for e in entries), ZERO)
        total_owed = sum((e.amount_owed for e in entries), ZERO)
        return PaymentReport(
            payments=entries,
            summary=ReportSummary(
                total_payments=len(entries),
                total_paid=total_paid,
                total_owed=total_owed,
                outstanding=total_owed - total_paid,
            ),
        )
