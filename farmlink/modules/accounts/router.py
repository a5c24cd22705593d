"""Authentication API router: registration, login, profile and password flows."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from farmlink.middleware.rate_limit import limiter
from farmlink.config import settings
from farmlink.database.session import get_db
from farmlink.modules.accounts.auth import AuthenticatedUser, get_current_user
from farmlink.modules.accounts.reset_tokens import ResetTokenStore
from farmlink.modules.accounts.schemas import (
    BuyerRegistrationCreate,
    ChangePasswordRequest,
    FarmerRegistrationCreate,
    LoginRequest,
    LoginResponse,
    PasswordResetConfirm,
    PasswordResetIssued,
    PasswordResetRequest,
    ProfileResponse,
    RegistrationResult,
    TokenStatusResponse,
)
from farmlink.modules.accounts.service import AccountService
from farmlink.schemas.responses import SuccessResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def get_reset_token_store() -> ResetTokenStore:
    return ResetTokenStore()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@router.post("/register/farmer", response_model=SuccessResponse[RegistrationResult], status_code=201)
@limiter.limit("10/minute")
async def register_farmer(
    request: Request,
    body: FarmerRegistrationCreate,
    db: AsyncSession = Depends(get_db),
):
    svc = AccountService(db)
    user, farmer, application = await svc.register_farmer(body)
    return SuccessResponse(
        data=RegistrationResult(user_id=user.id, profile_id=farmer.id, application_id=application.id),
        message="Farmer application submitted successfully. Please wait for admin approval.",
    )


@router.post("/register/buyer", response_model=SuccessResponse[RegistrationResult], status_code=201)
@limiter.limit("10/minute")
async def register_buyer(
    request: Request,
    body: BuyerRegistrationCreate,
    db: AsyncSession = Depends(get_db),
):
    svc = AccountService(db)
    user, buyer, registration = await svc.register_buyer(body)
    return SuccessResponse(
        data=RegistrationResult(user_id=user.id, profile_id=buyer.id, application_id=registration.id),
        message="Buyer registration submitted successfully. Please wait for admin approval.",
    )


# ---------------------------------------------------------------------------
# Login / profile
# ---------------------------------------------------------------------------


@router.post("/login", response_model=SuccessResponse[LoginResponse])
@limiter.limit("10/minute")
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    svc = AccountService(db)
    result = await svc.login(body.email_or_phone, body.password)
    return SuccessResponse(data=result, message="Login successful")


@router.get("/me", response_model=SuccessResponse[ProfileResponse])
async def me(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = AccountService(db)
    return SuccessResponse(data=await svc.get_profile(user.id))


@router.post("/change-password", response_model=SuccessResponse[None])
async def change_password(
    body: ChangePasswordRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    svc = AccountService(db)
    await svc.change_password(user.id, body.current_password, body.new_password)
    return SuccessResponse(data=None, message="Password changed successfully")


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@router.post("/forgot-password", response_model=SuccessResponse[PasswordResetIssued])
@limiter.limit("5/minute")
async def forgot_password(
    request: Request,
    body: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    reset_tokens: ResetTokenStore = Depends(get_reset_token_store),
):
    svc = AccountService(db, reset_tokens=reset_tokens)
    token = await svc.request_password_reset(body.email_or_phone)
    # Same response for known and unknown identifiers
    return SuccessResponse(
        data=PasswordResetIssued(reset_token=None if settings.is_production else token),
        message="If an account exists with this email or phone, a reset link has been sent.",
    )


@router.post("/reset-password", response_model=SuccessResponse[None])
@limiter.limit("5/minute")
async def reset_password(
    request: Request,
    body: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db),
    reset_tokens: ResetTokenStore = Depends(get_reset_token_store),
):
    svc = AccountService(db, reset_tokens=reset_tokens)
    await svc.reset_password(body.token, body.new_password)
    return SuccessResponse(
        data=None,
        message="Password reset successfully. You can now login with your new password.",
    )


@router.get("/verify-reset-token/{token}", response_model=SuccessResponse[TokenStatusResponse])
async def verify_reset_token(
    token: str,
    db: AsyncSession = Depends(get_db),
    reset_tokens: ResetTokenStore = Depends(get_reset_token_store),
):
    svc = AccountService(db, reset_tokens=reset_tokens)
    valid = await svc.verify_reset_token(token)
    return SuccessResponse(data=TokenStatusResponse(valid=valid), message="Reset token is valid")
