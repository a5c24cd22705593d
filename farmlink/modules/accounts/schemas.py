"""Pydantic v2 schemas for registration, login, password reset and admin review."""

from __future__ import annotations

import re
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from farmlink.models.enums import BuyerType, UserRole, UserStatus
from farmlink.modules.accounts.constants import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH
from farmlink.schemas.responses import PageMeta

_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)
_PHONE_RE = re.compile(r"^\+?[\d\s\-().]+$")


def _normalize_phone(value: str) -> str:
    cleaned = re.sub(r"[\s\-().]", "", value)
    digits = cleaned.lstrip("+")
    if not _PHONE_RE.match(value) or not digits.isdigit() or not 10 <= len(digits) <= 15:
        raise ValueError("Invalid phone number format")
    return cleaned


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AddressInput(BaseModel):
    address: str = Field(..., min_length=1, max_length=500)
    landmark: str | None = Field(None, max_length=200)
    is_default: bool = False


class _RegistrationBase(BaseModel):
    email: str = Field(..., max_length=255)
    phone: str
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    full_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not _EMAIL_RE.match(value):
            raise ValueError("Invalid email format")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        return _normalize_phone(value)


class FarmerRegistrationCreate(_RegistrationBase):
    farm_name: str | None = Field(None, max_length=100)
    region: str = Field(..., min_length=1, max_length=100)
    town: str = Field(..., min_length=1, max_length=100)
    weekly_capacity_min: int = Field(..., ge=1, le=100_000)
    weekly_capacity_max: int = Field(..., ge=1, le=100_000)
    produce_category: str = Field(..., min_length=1, max_length=50)
    feeding_method: str | None = Field(None, max_length=100)
    terms_accepted: bool

    @model_validator(mode="after")
    def _check_capacity_and_terms(self) -> FarmerRegistrationCreate:
        if self.weekly_capacity_max < self.weekly_capacity_min:
            raise ValueError("Maximum capacity must be greater than or equal to minimum capacity")
        if not self.terms_accepted:
            raise ValueError("You must agree to the platform rules")
        return self


class BuyerRegistrationCreate(_RegistrationBase):
    business_name: str | None = Field(None, max_length=100)
    buyer_type: BuyerType
    contact_person: str = Field(..., min_length=1, max_length=100)
    estimated_volume: int | None = Field(None, ge=1, le=100_000)
    delivery_addresses: list[AddressInput] = Field(..., min_length=1, max_length=10)


class LoginRequest(BaseModel):
    email_or_phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email_or_phone: str = Field(..., min_length=1)


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> PasswordResetConfirm:
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> ChangePasswordRequest:
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ReviewApprove(BaseModel):
    admin_notes: str | None = Field(None, max_length=1000)


class ReviewReject(BaseModel):
    rejection_reason: str = Field(..., min_length=1, max_length=1000)


class StatusUpdate(BaseModel):
    status: UserStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    phone: str
    role: UserRole
    status: UserStatus


class FarmerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str
    farm_name: str | None = None
    region: str
    town: str
    weekly_capacity_min: int
    weekly_capacity_max: int
    produce_category: str
    feeding_method: str | None = None
    verification_date: datetime | None = None
    user: UserResponse


class BuyerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str
    business_name: str | None = None
    buyer_type: BuyerType
    contact_person: str
    estimated_volume: int | None = None
    user: UserResponse


class FarmerApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: UserStatus
    terms_accepted: bool
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    admin_notes: str | None = None
    rejection_reason: str | None = None
    created_at: datetime
    farmer: FarmerResponse


class BuyerRegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: UserStatus
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    admin_notes: str | None = None
    rejection_reason: str | None = None
    created_at: datetime
    buyer: BuyerResponse


class RegistrationResult(BaseModel):
    user_id: uuid.UUID
    profile_id: uuid.UUID
    application_id: uuid.UUID


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class ProfileResponse(BaseModel):
    user: UserResponse
    farmer: FarmerResponse | None = None
    buyer: BuyerResponse | None = None


class TokenStatusResponse(BaseModel):
    valid: bool


class PasswordResetIssued(BaseModel):
    # Only populated outside production so the flow can be exercised without mail delivery
    reset_token: str | None = None


class FarmerListResponse(BaseModel):
    items: list[FarmerResponse]
    meta: PageMeta


class BuyerListResponse(BaseModel):
    items: list[BuyerResponse]
    meta: PageMeta
