"""Domain exception hierarchy for structured error responses.

Every error carries a stable ``code`` string and an HTTP ``status_code`` at
the class level. Services raise these at the point of detection and the
application's exception handlers serialise them without translation.
"""

from __future__ import annotations


class AppException(Exception):
    """Base exception for all domain errors.

    Subclasses set ``code`` and ``status_code`` at the class level; callers
    provide ``message`` and an optional ``details`` list.
    """

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class BadRequestException(AppException):
    code = "BAD_REQUEST"
    status_code = 400


class NotFoundException(AppException):
    code = "NOT_FOUND"
    status_code = 404


class ConflictException(AppException):
    code = "CONFLICT"
    status_code = 409


class ForbiddenException(AppException):
    code = "FORBIDDEN"
    status_code = 403


class UnauthorizedException(AppException):
    code = "UNAUTHORIZED"
    status_code = 401


class ValidationException(AppException):
    code = "VALIDATION_ERROR"
    status_code = 422


class BusinessRuleException(AppException):
    code = "BUSINESS_RULE_VIOLATION"
    status_code = 422


class RateLimitException(AppException):
    code = "RATE_LIMITED"
    status_code = 429


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class DuplicateUserException(ConflictException):
    code = "DUPLICATE_USER"


class InvalidCredentialsException(UnauthorizedException):
    code = "INVALID_CREDENTIALS"


class InvalidPasswordException(UnauthorizedException):
    code = "INVALID_PASSWORD"


class AccountNotActiveException(ForbiddenException):
    code = "ACCOUNT_NOT_ACTIVE"


class UserNotFoundException(NotFoundException):
    code = "USER_NOT_FOUND"


class ApplicationNotFoundException(NotFoundException):
    code = "APPLICATION_NOT_FOUND"


class InvalidApplicationStatusException(BadRequestException):
    code = "INVALID_APPLICATION_STATUS"


class InvalidTokenException(BadRequestException):
    code = "INVALID_TOKEN"


class TokenExpiredException(BadRequestException):
    code = "TOKEN_EXPIRED"


# ---------------------------------------------------------------------------
# Farmers / buyers
# ---------------------------------------------------------------------------


class FarmerNotFoundException(NotFoundException):
    code = "FARMER_NOT_FOUND"


class BuyerNotFoundException(NotFoundException):
    code = "BUYER_NOT_FOUND"


class BuyerNotActiveException(ForbiddenException):
    code = "BUYER_NOT_ACTIVE"


class BuyerSuspendedException(BadRequestException):
    code = "BUYER_SUSPENDED"


class AddressNotFoundException(NotFoundException):
    code = "ADDRESS_NOT_FOUND"


class AddressInUseException(BadRequestException):
    code = "ADDRESS_IN_USE"


# ---------------------------------------------------------------------------
# Availability, orders and allocation
# ---------------------------------------------------------------------------


class DuplicateSubmissionException(ConflictException):
    code = "DUPLICATE_SUBMISSION"


class InvalidQuantityException(BadRequestException):
    code = "INVALID_QUANTITY"


class InvalidReadyDateException(BadRequestException):
    code = "INVALID_READY_DATE"


class InvalidDeliveryDateException(BadRequestException):
    code = "INVALID_DELIVERY_DATE"


class OrderNotFoundException(NotFoundException):
    code = "ORDER_NOT_FOUND"


class InvalidOrderStatusException(BadRequestException):
    code = "INVALID_ORDER_STATUS"


class AlreadyAllocatedException(BadRequestException):
    code = "ALREADY_ALLOCATED"


class OverAllocationException(BadRequestException):
    code = "OVER_ALLOCATION"


class AssignmentNotFoundException(NotFoundException):
    code = "ASSIGNMENT_NOT_FOUND"


class InvalidAssignmentStatusException(BadRequestException):
    code = "INVALID_ASSIGNMENT_STATUS"


class AssignmentImmutableError(InvalidAssignmentStatusException):
    """Raised from the flush guard when a confirmed assignment is written to."""


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class InvalidAmountException(BadRequestException):
    code = "INVALID_AMOUNT"
