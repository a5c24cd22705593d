"""Unit tests for authentication router endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from farmlink.config import settings
from farmlink.database.session import get_db
from farmlink.middleware.rate_limit import limiter
from farmlink.models.enums import UserRole, UserStatus
from farmlink.modules.accounts.router import get_reset_token_store, router
from farmlink.modules.accounts.schemas import LoginResponse, UserResponse

# ── Test app setup ────────────────────────────────────────────────────────

app = FastAPI()
app.include_router(router)
app.state.limiter = limiter

_mock_db = AsyncMock()
_mock_store = AsyncMock()


async def _override_get_db():
    yield _mock_db


def _override_reset_store():
    return _mock_store


app.dependency_overrides[get_db] = _override_get_db
app.dependency_overrides[get_reset_token_store] = _override_reset_store

client = TestClient(app)


@pytest.fixture(autouse=True)
def _no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


def _farmer_body(**overrides):
    body = {
        "email": "ama@example.com",
        "phone": "0241234567",
        "password": "Password1!",
        "full_name": "Ama Mensah",
        "region": "Ashanti",
        "town": "Kumasi",
        "weekly_capacity_min": 50,
        "weekly_capacity_max": 200,
        "produce_category": "Poultry",
        "terms_accepted": True,
    }
    body.update(overrides)
    return body


@patch("farmlink.modules.accounts.router.AccountService")
def test_register_farmer(mock_svc_cls):
    """POST /auth/register/farmer returns the new ids."""
    user, farmer, application = MagicMock(), MagicMock(), MagicMock()
    user.id, farmer.id, application.id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    mock_svc = AsyncMock()
    mock_svc.register_farmer.return_value = (user, farmer, application)
    mock_svc_cls.return_value = mock_svc

    response = client.post("/auth/register/farmer", json=_farmer_body())
    assert response.status_code == 201
    data = response.json()["data"]
    assert data == {
        "user_id": str(user.id),
        "profile_id": str(farmer.id),
        "application_id": str(application.id),
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"terms_accepted": False},
        {"weekly_capacity_min": 300},
        {"email": "not-an-email"},
        {"password": "short"},
    ],
)
def test_register_farmer_validation(overrides):
    response = client.post("/auth/register/farmer", json=_farmer_body(**overrides))
    assert response.status_code == 422


@patch("farmlink.modules.accounts.router.AccountService")
def test_login(mock_svc_cls):
    user_id = uuid.uuid4()
    mock_svc = AsyncMock()
    mock_svc.login.return_value = LoginResponse(
        access_token="jwt",
        expires_at=datetime(2024, 1, 9, 8, 0, tzinfo=UTC),
        user=UserResponse(
            id=user_id,
            email="kofi@example.com",
            phone="0241234568",
            role=UserRole.BUYER,
            status=UserStatus.ACTIVE,
        ),
    )
    mock_svc_cls.return_value = mock_svc

    response = client.post(
        "/auth/login", json={"email_or_phone": "kofi@example.com", "password": "Password1!"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["data"]["access_token"] == "jwt"
    assert body["data"]["user"]["role"] == "BUYER"
    mock_svc.login.assert_called_once_with("kofi@example.com", "Password1!")


@patch("farmlink.modules.accounts.router.AccountService")
def test_forgot_password_exposes_token_outside_production(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.request_password_reset.return_value = "abc123"
    mock_svc_cls.return_value = mock_svc

    response = client.post("/auth/forgot-password", json={"email_or_phone": "kofi@example.com"})
    assert response.status_code == 200
    assert response.json()["data"]["reset_token"] == "abc123"
    assert mock_svc_cls.call_args.kwargs["reset_tokens"] is _mock_store


@patch("farmlink.modules.accounts.router.AccountService")
def test_forgot_password_hides_token_in_production(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.request_password_reset.return_value = "abc123"
    mock_svc_cls.return_value = mock_svc

    with patch.object(settings, "environment", "production"):
        response = client.post("/auth/forgot-password", json={"email_or_phone": "kofi@example.com"})
    assert response.status_code == 200
    assert response.json()["data"]["reset_token"] is None


def test_reset_password_requires_matching_passwords():
    response = client.post(
        "/auth/reset-password",
        json={"token": "abc", "new_password": "Password1!", "confirm_password": "Password2!"},
    )
    assert response.status_code == 422


@patch("farmlink.modules.accounts.router.AccountService")
def test_reset_password(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc_cls.return_value = mock_svc

    response = client.post(
        "/auth/reset-password",
        json={"token": "abc", "new_password": "Password1!", "confirm_password": "Password1!"},
    )
    assert response.status_code == 200
    mock_svc.reset_password.assert_called_once_with("abc", "Password1!")
