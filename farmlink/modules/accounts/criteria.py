"""Typed filter criteria for admin account listings.

Each criteria object knows how to narrow a SELECT; unset fields add no
condition.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Select

from farmlink.models.buyer import Buyer
from farmlink.models.buyer_registration import BuyerRegistration
from farmlink.models.enums import BuyerType, UserStatus
from farmlink.models.farmer import Farmer
from farmlink.models.farmer_application import FarmerApplication
from farmlink.models.user import User


@dataclass(frozen=True)
class FarmerCriteria:
    status: UserStatus | None = None
    region: str | None = None
    produce_category: str | None = None
    limit: int = 50
    offset: int = 0

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(User.status == self.status)
        if self.region:
            query = query.where(Farmer.region == self.region)
        if self.produce_category:
            query = query.where(Farmer.produce_category == self.produce_category)
        return query


@dataclass(frozen=True)
class BuyerCriteria:
    status: UserStatus | None = None
    buyer_type: BuyerType | None = None
    limit: int = 50
    offset: int = 0

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(User.status == self.status)
        if self.buyer_type is not None:
            query = query.where(Buyer.buyer_type == self.buyer_type)
        return query


@dataclass(frozen=True)
class FarmerApplicationCriteria:
    status: UserStatus | None = UserStatus.APPLIED

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(FarmerApplication.status == self.status)
        return query


@dataclass(frozen=True)
class BuyerRegistrationCriteria:
    status: UserStatus | None = UserStatus.PENDING

    def apply(self, query: Select) -> Select:
        if self.status is not None:
            query = query.where(BuyerRegistration.status == self.status)
        return query
