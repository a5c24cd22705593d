"""Account lifecycle constants."""

from farmlink.models.enums import UserStatus

# Statuses allowed to sign in and act on the platform
LOGIN_STATUSES = frozenset({UserStatus.ACTIVE, UserStatus.PROBATIONARY})

STATUS_MESSAGES: dict[UserStatus, str] = {
    UserStatus.PENDING: "Your account is pending approval",
    UserStatus.APPLIED: "Your application is under review",
    UserStatus.SUSPENDED: "Your account has been suspended",
    UserStatus.BLOCKED: "Your account has been blocked",
}
DEFAULT_STATUS_MESSAGE = "Your account cannot access the platform"

# Farmer applications are reviewed from APPLIED; buyer registrations from PENDING
FARMER_APPROVED_STATUS = UserStatus.PROBATIONARY
BUYER_APPROVED_STATUS = UserStatus.ACTIVE
REJECTED_STATUS = UserStatus.BLOCKED

# Password reset tokens
RESET_TOKEN_BYTES = 32
RESET_TOKEN_PREFIX = "password-reset"

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
