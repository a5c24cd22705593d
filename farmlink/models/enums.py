import enum


class UserRole(str, enum.Enum):
    FARMER = "FARMER"
    BUYER = "BUYER"
    ADMIN = "ADMIN"


class UserStatus(str, enum.Enum):
    APPLIED = "APPLIED"
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    PROBATIONARY = "PROBATIONARY"
    SUSPENDED = "SUSPENDED"
    BLOCKED = "BLOCKED"


class BuyerType(str, enum.Enum):
    RESTAURANT = "RESTAURANT"
    HOTEL = "HOTEL"
    CATERER = "CATERER"
    INDIVIDUAL = "INDIVIDUAL"


class OrderType(str, enum.Enum):
    ONE_TIME = "ONE_TIME"
    STANDING = "STANDING"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    # APPROVED and FAILED are not produced by any transition; see DESIGN.md.
    APPROVED = "APPROVED"
    ALLOCATION = "ALLOCATION"
    DELIVERED = "DELIVERED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class AssignmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class QualityResult(str, enum.Enum):
    PASS = "PASS"
    PARTIAL = "PARTIAL"
    FAIL = "FAIL"


class PerformanceTier(str, enum.Enum):
    PROBATIONARY = "PROBATIONARY"
    STANDARD = "STANDARD"
    PREFERRED = "PREFERRED"


class PaymentStatus(str, enum.Enum):
    NOT_PAID = "NOT_PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    MOBILE_MONEY = "MOBILE_MONEY"
    CASH = "CASH"
    CHECK = "CHECK"
