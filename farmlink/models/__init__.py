# Import all models so SQLAlchemy metadata is populated for create_all and migrations
from farmlink.models.buyer import Buyer
from farmlink.models.buyer_registration import BuyerRegistration
from farmlink.models.delivery_address import DeliveryAddress
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import (
    AssignmentStatus,
    BuyerType,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    PerformanceTier,
    QualityResult,
    UserRole,
    UserStatus,
)
from farmlink.models.farmer import Farmer
from farmlink.models.farmer_application import FarmerApplication
from farmlink.models.farmer_performance import FarmerPerformance
from farmlink.models.farmer_performance_breakdown import FarmerPerformanceBreakdown
from farmlink.models.farmer_performance_history import FarmerPerformanceHistory
from farmlink.models.order import Order
from farmlink.models.payment import Payment
from farmlink.models.user import User
from farmlink.models.weekly_availability import WeeklyAvailability

from farmlink.database.immutability import register_immutability_listeners  # noqa: E402

register_immutability_listeners()

__all__ = [
    "AssignmentStatus",
    "Buyer",
    "BuyerRegistration",
    "BuyerType",
    "DeliveryAddress",
    "DeliveryAssignment",
    "Farmer",
    "FarmerApplication",
    "FarmerPerformance",
    "FarmerPerformanceBreakdown",
    "FarmerPerformanceHistory",
    "Order",
    "OrderStatus",
    "OrderType",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "PerformanceTier",
    "QualityResult",
    "User",
    "UserRole",
    "UserStatus",
    "WeeklyAvailability",
]
