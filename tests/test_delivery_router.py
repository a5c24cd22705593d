"""Unit tests for delivery router endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from farmlink.clock import DeterministicClock
from farmlink.database.session import get_db
from farmlink.models.enums import AssignmentStatus, QualityResult, UserRole, UserStatus
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.accounts.profiles import current_farmer
from farmlink.modules.delivery.router import admin_router, farmer_router

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

NOW = datetime(2024, 1, 12, 10, 0, tzinfo=UTC)


def _make_mock_assignment(status=AssignmentStatus.DELIVERED, quantity_delivered=40):
    assignment = MagicMock()
    assignment.id = uuid.uuid4()
    assignment.order_id = uuid.uuid4()
    assignment.farmer_id = _farmer.id
    assignment.assigned_quantity = 40
    assignment.delivery_date = NOW
    assignment.delivery_address_id = uuid.uuid4()
    assignment.status = status
    assignment.quantity_delivered = quantity_delivered
    assignment.quality_result = QualityResult.PASS if quantity_delivered else None
    assignment.confirmation_notes = None
    assignment.confirmed_by = _admin.id
    assignment.confirmed_at = NOW
    assignment.created_at = NOW
    return assignment


@patch("farmlink.modules.delivery.router.DeliveryService")
def test_confirm_delivered(mock_svc_cls):
    """POST /admin/deliveries/{id}/confirm records a delivery."""
    assignment = _make_mock_assignment()
    mock_svc = AsyncMock()
    mock_svc.confirm_delivery.return_value = assignment
    mock_svc_cls.return_value = mock_svc

    response = client.post(
        f"/admin/deliveries/{assignment.id}/confirm",
        json={"delivered": True, "quantity_delivered": 40, "quality_result": "PASS"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Delivery confirmed successfully"
    assert body["data"]["status"] == "DELIVERED"

    assignment_id, admin_id, data = mock_svc.confirm_delivery.call_args.args
    assert assignment_id == assignment.id
    assert admin_id == _admin.id
    assert data.quality_result == QualityResult.PASS


@patch("farmlink.modules.delivery.router.DeliveryService")
def test_confirm_failed(mock_svc_cls):
    assignment = _make_mock_assignment(status=AssignmentStatus.FAILED, quantity_delivered=None)
    mock_svc = AsyncMock()
    mock_svc.confirm_delivery.return_value = assignment
    mock_svc_cls.return_value = mock_svc

    response = client.post(f"/admin/deliveries/{assignment.id}/confirm", json={"delivered": False})
    assert response.status_code == 200
    assert response.json()["message"] == "Delivery marked as failed"


def test_confirm_requires_outcome():
    response = client.post(f"/admin/deliveries/{uuid.uuid4()}/confirm", json={})
    assert response.status_code == 422


@patch("farmlink.modules.delivery.router.DeliveryService")
def test_list_assignments_passes_filters(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.list_assignments.return_value = ([], 0)
    mock_svc_cls.return_value = mock_svc
    farmer_id = uuid.uuid4()

    response = client.get(
        "/admin/deliveries",
        params={"status": "PENDING", "farmer_id": str(farmer_id), "limit": 10},
    )
    assert response.status_code == 200
    assert response.json()["data"]["meta"] == {"total": 0, "limit": 10, "offset": 0}

    criteria = mock_svc.list_assignments.call_args.args[0]
    assert criteria.status == AssignmentStatus.PENDING
    assert criteria.farmer_id == farmer_id
    assert criteria.order_id is None


def test_list_assignments_rejects_oversized_page():
    response = client.get("/admin/deliveries", params={"limit": 500})
    assert response.status_code == 422


@patch("farmlink.modules.delivery.router.DeliveryService")
def test_farmer_upcoming_deliveries(mock_svc_cls):
    """GET /farmers/deliveries?upcoming=true filters from the service clock."""
    mock_svc = AsyncMock()
    mock_svc.clock = DeterministicClock(NOW)
    mock_svc.list_for_farmer.return_value = []
    mock_svc_cls.return_value = mock_svc

    response = client.get("/farmers/deliveries", params={"upcoming": "true"})
    assert response.status_code == 200
    assert response.json()["data"] == []

    farmer_id, criteria = mock_svc.list_for_farmer.call_args.args
    assert farmer_id == _farmer.id
    assert criteria.upcoming_from == NOW
    assert criteria.status is None
