"""Unit tests for payment router endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from farmlink.database.session import get_db
from farmlink.models.enums import PaymentMethod, PaymentStatus, UserRole, UserStatus
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.accounts.profiles import current_farmer
from farmlink.modules.payments.router import admin_router, farmer_router
from farmlink.modules.payments.schemas import Balance, PaymentReport, ReportSummary

# ── Test app setup ────────────────────────────────────────────────────────

app = FastAPI()
app.include_router(admin_router)
app.include_router(farmer_router)

_admin = AuthenticatedUser(
    id=uuid.uuid4(),
    email="admin@farmlink.test",
    role=UserRole.ADMIN,
    status=UserStatus.ACTIVE,
)
_farmer = MagicMock()
_farmer.id = uuid.uuid4()

_mock_db = AsyncMock()


async def _override_require_admin():
    return _admin


async def _override_current_farmer():
    return _farmer


async def _override_get_db():
    yield _mock_db


app.dependency_overrides[require_admin] = _override_require_admin
app.dependency_overrides[current_farmer] = _override_current_farmer
app.dependency_overrides[get_db] = _override_get_db

client = TestClient(app)

PAID_AT = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)


def _make_mock_payment():
    payment = MagicMock()
    payment.id = uuid.uuid4()
    payment.farmer_id = _farmer.id
    payment.delivery_assignment_id = None
    payment.amount_owed = Decimal("300")
    payment.amount_paid = Decimal("100")
    payment.payment_status = PaymentStatus.PARTIALLY_PAID
    payment.payment_method = PaymentMethod.CASH
    payment.payment_date = PAID_AT
    payment.recorded_by = _admin.id
    payment.notes = None
    payment.created_at = PAID_AT
    return payment


@patch("farmlink.modules.payments.router.PaymentService")
def test_record_payment(mock_svc_cls):
    """POST /admin/payments appends to the ledger."""
    mock_svc = AsyncMock()
    mock_svc.record_payment.return_value = _make_mock_payment()
    mock_svc_cls.return_value = mock_svc

    response = client.post(
        "/admin/payments",
        json={
            "farmer_id": str(_farmer.id),
            "amount_paid": "100.00",
            "payment_method": "CASH",
            "payment_date": PAID_AT.isoformat(),
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Payment recorded successfully"
    assert body["data"]["payment_status"] == "PARTIALLY_PAID"

    admin_id, data = mock_svc.record_payment.call_args.args
    assert admin_id == _admin.id
    assert data.amount_paid == Decimal("100.00")


def test_record_payment_rejects_unknown_method():
    response = client.post(
        "/admin/payments",
        json={
            "farmer_id": str(_farmer.id),
            "amount_paid": "10",
            "payment_method": "BARTER",
            "payment_date": PAID_AT.isoformat(),
        },
    )
    assert response.status_code == 422


@patch("farmlink.modules.payments.router.PaymentService")
def test_payment_report_filters(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.report.return_value = PaymentReport(
        payments=[],
        summary=ReportSummary(
            total_payments=0, total_paid=Decimal(0), total_owed=Decimal(0), outstanding=Decimal(0)
        ),
    )
    mock_svc_cls.return_value = mock_svc

    response = client.get("/admin/payments", params={"status": "PAID", "farmer_id": str(_farmer.id)})
    assert response.status_code == 200
    assert response.json()["data"]["summary"]["total_payments"] == 0

    criteria = mock_svc.report.call_args.args[0]
    assert criteria.status == PaymentStatus.PAID
    assert criteria.farmer_id == _farmer.id
    assert criteria.date_from is None


@patch("farmlink.modules.payments.router.PaymentService")
def test_farmer_balance(mock_svc_cls):
    """GET /farmers/payments/balance is scoped to the calling farmer."""
    mock_svc = AsyncMock()
    mock_svc.balance.return_value = Balance(
        total_owed=Decimal("300"),
        total_paid=Decimal("100"),
        outstanding=Decimal("200"),
        delivered_assignments=1,
    )
    mock_svc_cls.return_value = mock_svc

    response = client.get("/farmers/payments/balance")
    assert response.status_code == 200
    data = response.json()["data"]
    assert Decimal(data["outstanding"]) == Decimal("200")
    assert data["delivered_assignments"] == 1
    mock_svc.balance.assert_called_once_with(_farmer.id)


@patch("farmlink.modules.payments.router.PaymentService")
def test_farmer_payments(mock_svc_cls):
    mock_svc = AsyncMock()
    balance = Balance(
        total_owed=Decimal("300"),
        total_paid=Decimal("100"),
        outstanding=Decimal("200"),
        delivered_assignments=1,
    )
    mock_svc.farmer_payments.return_value = ([_make_mock_payment()], balance)
    mock_svc_cls.return_value = mock_svc

    response = client.get("/farmers/payments")
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["payments"]) == 1
    assert data["payments"][0]["payment_method"] == "CASH"
