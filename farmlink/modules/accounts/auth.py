"""JWT authentication and role checks for FastAPI.

Validates Bearer tokens from the Authorization header, extracts the user's
id, role and account status, and exposes role-gated dependencies for the
farmer, buyer and admin routers.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from farmlink.clock import Clock, SystemClock
from farmlink.config import settings
from farmlink.exceptions import AccountNotActiveException, ForbiddenException, UnauthorizedException
from farmlink.models.enums import UserRole, UserStatus
from farmlink.modules.accounts.constants import DEFAULT_STATUS_MESSAGE, LOGIN_STATUSES, STATUS_MESSAGES

logger = logging.getLogger(__name__)

# FastAPI security scheme; extracts the Bearer token from Authorization header
_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """Represents the authenticated user extracted from a JWT token."""

    id: uuid.UUID
    email: str
    role: UserRole
    status: UserStatus

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    status: UserStatus,
    clock: Clock | None = None,
) -> tuple[str, datetime]:
    """Issue an access token; returns the token and its expiry."""
    expires_at = (clock or SystemClock()).now() + timedelta(minutes=settings.jwt_expiry_minutes)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "status": status.value,
        "type": "access",
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def _decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises UnauthorizedException on failure."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency that extracts and validates the current user from JWT."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = _decode_token(credentials.credentials)
    if payload.get("type") != "access":
        raise UnauthorizedException("Invalid or expired token")

    try:
        user = AuthenticatedUser(
            id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            role=UserRole(payload["role"]),
            status=UserStatus(payload["status"]),
        )
    except (KeyError, ValueError) as exc:
        raise UnauthorizedException("Token is missing required claims") from exc

    request.state.user = user
    return user


def ensure_can_act(status: UserStatus) -> None:
    """Raise ACCOUNT_NOT_ACTIVE unless the status may use the platform."""
    if status not in LOGIN_STATUSES:
        raise AccountNotActiveException(STATUS_MESSAGES.get(status, DEFAULT_STATUS_MESSAGE))


def require_role(*roles: UserRole):
    """Dependency factory to restrict an endpoint to one or more roles.

    Non-admin callers must also hold an ACTIVE or PROBATIONARY account.
    """

    async def _check(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.role not in roles:
            raise ForbiddenException(
                f"Insufficient permissions. Required role: {' or '.join(r.value for r in roles)}"
            )
        if not user.is_admin:
            ensure_can_act(user.status)
        return user

    return _check


require_admin = require_role(UserRole.ADMIN)
require_farmer = require_role(UserRole.FARMER)
require_buyer = require_role(UserRole.BUYER)
