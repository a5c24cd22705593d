"""Account service: registration, login, profile and password management."""

from __future__ import annotations

import logging
import re
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.clock import Clock, SystemClock
from farmlink.database.unit_of_work import UnitOfWork
from farmlink.exceptions import (
    DuplicateUserException,
    InvalidCredentialsException,
    InvalidPasswordException,
    UserNotFoundException,
)
from farmlink.models.buyer import Buyer
from farmlink.models.buyer_registration import BuyerRegistration
from farmlink.models.delivery_address import DeliveryAddress
from farmlink.models.enums import UserRole, UserStatus
from farmlink.models.farmer import Farmer
from farmlink.models.farmer_application import FarmerApplication
from farmlink.models.user import User
from farmlink.modules.accounts.auth import create_access_token, ensure_can_act
from farmlink.modules.accounts.passwords import hash_password, verify_password
from farmlink.modules.accounts.reset_tokens import ResetTokenStore
from farmlink.modules.accounts.schemas import (
    BuyerRegistrationCreate,
    BuyerResponse,
    FarmerRegistrationCreate,
    FarmerResponse,
    LoginResponse,
    ProfileResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(
        self,
        db: AsyncSession,
        clock: Clock | None = None,
        reset_tokens: ResetTokenStore | None = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.uow = UnitOfWork(db)
        self.reset_tokens = reset_tokens or ResetTokenStore(clock=self.clock)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _find_by_identifier(self, email_or_phone: str) -> User | None:
        identifier = email_or_phone.strip()
        phone = re.sub(r"[\s\-().]", "", identifier)
        result = await self.db.execute(
            select(User).where(or_(User.email == identifier.lower(), User.phone == phone))
        )
        return result.scalars().first()

    async def _ensure_unique(self, email: str, phone: str) -> None:
        result = await self.db.execute(
            select(User.id).where(or_(User.email == email, User.phone == phone))
        )
        if result.scalars().first() is not None:
            raise DuplicateUserException("Email or phone number already registered")

    async def _get_user(self, user_id: uuid.UUID) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundException(f"User {user_id} not found")
        return user

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register_farmer(self, data: FarmerRegistrationCreate) -> tuple[User, Farmer, FarmerApplication]:
        """Create the user, farmer profile and pending application together."""
        await self._ensure_unique(data.email, data.phone)
        password_hash = hash_password(data.password)
        now = self.clock.now()

        async with self.uow.transaction():
            user = User(
                email=data.email,
                phone=data.phone,
                password_hash=password_hash,
                role=UserRole.FARMER,
                status=UserStatus.APPLIED,
            )
            self.db.add(user)
            await self.db.flush()

            farmer = Farmer(
                user_id=user.id,
                full_name=data.full_name.strip(),
                farm_name=data.farm_name,
                region=data.region.strip(),
                town=data.town.strip(),
                weekly_capacity_min=data.weekly_capacity_min,
                weekly_capacity_max=data.weekly_capacity_max,
                produce_category=data.produce_category.strip(),
                feeding_method=data.feeding_method,
            )
            farmer.user = user
            self.db.add(farmer)
            await self.db.flush()

            application = FarmerApplication(
                farmer_id=farmer.id,
                status=UserStatus.APPLIED,
                terms_accepted=data.terms_accepted,
                terms_accepted_at=now if data.terms_accepted else None,
            )
            application.farmer = farmer
            self.db.add(application)
            await self.db.flush()

        logger.info("Registered farmer %s (user %s)", farmer.id, user.id)
        return user, farmer, application

    async def register_buyer(self, data: BuyerRegistrationCreate) -> tuple[User, Buyer, BuyerRegistration]:
        """Create the user, buyer profile, registration and delivery addresses together."""
        await self._ensure_unique(data.email, data.phone)
        password_hash = hash_password(data.password)
        has_default = any(addr.is_default for addr in data.delivery_addresses)

        async with self.uow.transaction():
            user = User(
                email=data.email,
                phone=data.phone,
                password_hash=password_hash,
                role=UserRole.BUYER,
                status=UserStatus.PENDING,
            )
            self.db.add(user)
            await self.db.flush()

            buyer = Buyer(
                user_id=user.id,
                full_name=data.full_name.strip(),
                business_name=data.business_name,
                buyer_type=data.buyer_type,
                contact_person=data.contact_person.strip(),
                estimated_volume=data.estimated_volume,
            )
            buyer.user = user
            self.db.add(buyer)
            await self.db.flush()

            registration = BuyerRegistration(buyer_id=buyer.id, status=UserStatus.PENDING)
            registration.buyer = buyer
            self.db.add(registration)

            default_assigned = False
            for index, addr in enumerate(data.delivery_addresses):
                # Only one default: the first flagged, or the first address if none is
                is_default = (addr.is_default and not default_assigned) or (index == 0 and not has_default)
                default_assigned = default_assigned or is_default
                self.db.add(
                    DeliveryAddress(
                        buyer_id=buyer.id,
                        address=addr.address.strip(),
                        landmark=addr.landmark,
                        is_default=is_default,
                    )
                )
            await self.db.flush()

        logger.info("Registered buyer %s (user %s)", buyer.id, user.id)
        return user, buyer, registration

    # ------------------------------------------------------------------
    # Login / profile
    # ------------------------------------------------------------------

    async def login(self, email_or_phone: str, password: str) -> LoginResponse:
        user = await self._find_by_identifier(email_or_phone)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email_or_phone)
            raise InvalidCredentialsException("Invalid email/phone or password")

        ensure_can_act(user.status)

        token, expires_at = create_access_token(
            user.id, user.email, user.role, user.status, clock=self.clock
        )
        logger.info("User %s logged in", user.id)
        return LoginResponse(
            access_token=token,
            expires_at=expires_at,
            user=UserResponse.model_validate(user),
        )

    async def get_profile(self, user_id: uuid.UUID) -> ProfileResponse:
        user = await self._get_user(user_id)
        profile = ProfileResponse(user=UserResponse.model_validate(user))

        if user.role == UserRole.FARMER:
            result = await self.db.execute(select(Farmer).where(Farmer.user_id == user.id))
            farmer = result.scalar_one_or_none()
            if farmer is not None:
                profile.farmer = FarmerResponse.model_validate(farmer)
        elif user.role == UserRole.BUYER:
            result = await self.db.execute(select(Buyer).where(Buyer.user_id == user.id))
            buyer = result.scalar_one_or_none()
            if buyer is not None:
                profile.buyer = BuyerResponse.model_validate(buyer)
        return profile

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    async def change_password(self, user_id: uuid.UUID, current_password: str, new_password: str) -> None:
        user = await self._get_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise InvalidPasswordException("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        await self.db.flush()
        logger.info("Password changed for user %s", user_id)

    async def request_password_reset(self, email_or_phone: str) -> str | None:
        """Issue a reset token. Unknown identifiers return None without raising.

        Delivering the token to the user is left to the caller.
        """
        user = await self._find_by_identifier(email_or_phone)
        if user is None:
            logger.info("Password reset requested for unknown identifier")
            return None
        return await self.reset_tokens.issue(user.id)

    async def verify_reset_token(self, token: str) -> bool:
        await self.reset_tokens.peek(token)
        return True

    async def reset_password(self, token: str, new_password: str) -> None:
        record = await self.reset_tokens.consume(token)
        user = await self._get_user(record.user_id)
        user.password_hash = hash_password(new_password)
        await self.db.flush()
        logger.info("Password reset for user %s", user.id)
