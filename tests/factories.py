"""Row builders for service tests. Each helper flushes so ids are populated."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.models.buyer import Buyer
from farmlink.models.delivery_address import DeliveryAddress
from farmlink.models.enums import BuyerType, OrderStatus, OrderType, UserRole, UserStatus
from farmlink.models.farmer import Farmer
from farmlink.models.order import Order
from farmlink.models.user import User
from farmlink.models.weekly_availability import WeeklyAvailability
from farmlink.modules.accounts.passwords import hash_password


def _unique_contact() -> tuple[str, str]:
    suffix = uuid.uuid4().hex[:10]
    digits = str(int(suffix, 16))[-10:].rjust(10, "0")
    return f"user-{suffix}@example.com", f"+233{digits}"


async def make_user(
    db: AsyncSession,
    role: UserRole,
    status: UserStatus = UserStatus.ACTIVE,
    password: str = "Password1!",
) -> User:
    email, phone = _unique_contact()
    user = User(
        email=email,
        phone=phone,
        password_hash=hash_password(password),
        role=role,
        status=status,
    )
    db.add(user)
    await db.flush()
    return user


async def make_admin(db: AsyncSession) -> User:
    return await make_user(db, UserRole.ADMIN)


async def make_farmer(
    db: AsyncSession,
    status: UserStatus = UserStatus.ACTIVE,
    full_name: str = "Ama Mensah",
    region: str = "Ashanti",
) -> Farmer:
    user = await make_user(db, UserRole.FARMER, status=status)
    farmer = Farmer(
        user_id=user.id,
        full_name=full_name,
        farm_name=f"{full_name} Farm",
        region=region,
        town="Kumasi",
        weekly_capacity_min=50,
        weekly_capacity_max=200,
        produce_category="Poultry",
    )
    farmer.user = user
    db.add(farmer)
    await db.flush()
    return farmer


async def make_buyer(
    db: AsyncSession,
    status: UserStatus = UserStatus.ACTIVE,
    buyer_type: BuyerType = BuyerType.RESTAURANT,
) -> tuple[Buyer, DeliveryAddress]:
    user = await make_user(db, UserRole.BUYER, status=status)
    buyer = Buyer(
        user_id=user.id,
        full_name="Kofi Owusu",
        business_name="Owusu Chop Bar",
        buyer_type=buyer_type,
        contact_person="Kofi Owusu",
    )
    buyer.user = user
    db.add(buyer)
    await db.flush()

    address = DeliveryAddress(buyer_id=buyer.id, address="12 Ring Road, Accra", is_default=True)
    db.add(address)
    await db.flush()
    return buyer, address


async def make_order(
    db: AsyncSession,
    buyer: Buyer,
    address: DeliveryAddress,
    quantity: int = 100,
    delivery_date: datetime | None = None,
    status: OrderStatus = OrderStatus.ALLOCATION,
    product_type: str = "Broilers",
) -> Order:
    order = Order(
        buyer_id=buyer.id,
        product_type=product_type,
        quantity=quantity,
        order_type=OrderType.ONE_TIME,
        delivery_date=delivery_date or datetime(2024, 1, 12, 9, 0, tzinfo=UTC),
        delivery_address_id=address.id,
        status=status,
    )
    db.add(order)
    await db.flush()
    return order


async def make_availability(
    db: AsyncSession,
    farmer: Farmer,
    week_start: datetime,
    is_late: bool = False,
    product_type: str = "Broilers",
) -> WeeklyAvailability:
    row = WeeklyAvailability(
        farmer_id=farmer.id,
        week_start_date=week_start,
        product_type=product_type,
        quantity_available=100,
        ready_date=week_start + timedelta(days=4),
        is_late=is_late,
    )
    db.add(row)
    await db.flush()
    return row
