"""Unit tests for admin allocation router endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from farmlink.database.session import get_db
from farmlink.models.enums import AssignmentStatus, UserRole, UserStatus
from farmlink.modules.accounts.auth import AuthenticatedUser, require_admin
from farmlink.modules.allocation.router import router
from farmlink.modules.allocation.schemas import AllocationOverview, AllocationResult, AssignmentResponse

# ── Test app setup ────────────────────────────────────────────────────────

app = FastAPI()
app.include_router(router)

_admin = AuthenticatedUser(
    id=uuid.uuid4(),
    email="admin@farmlink.test",
    role=UserRole.ADMIN,
    status=UserStatus.ACTIVE,
)

_mock_db = AsyncMock()


async def _override_require_admin():
    return _admin


async def _override_get_db():
    yield _mock_db


app.dependency_overrides[require_admin] = _override_require_admin
app.dependency_overrides[get_db] = _override_get_db

client = TestClient(app)

NOW = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


def _make_mock_assignment(quantity=60):
    assignment = MagicMock()
    assignment.id = uuid.uuid4()
    assignment.order_id = uuid.uuid4()
    assignment.farmer_id = uuid.uuid4()
    assignment.assigned_quantity = quantity
    assignment.delivery_date = NOW
    assignment.delivery_address_id = uuid.uuid4()
    assignment.status = AssignmentStatus.PENDING
    assignment.created_at = NOW
    return assignment


@patch("farmlink.modules.allocation.router.AllocationService")
def test_allocate(mock_svc_cls):
    """POST /admin/allocations splits an order across farmers."""
    rows = [AssignmentResponse.model_validate(_make_mock_assignment(q)) for q in (60, 40)]
    mock_svc = AsyncMock()
    mock_svc.allocate.return_value = AllocationResult(
        assignments=rows, total_assigned=100, remaining_quantity=20
    )
    mock_svc_cls.return_value = mock_svc
    order_id = uuid.uuid4()
    farmer_a, farmer_b = uuid.uuid4(), uuid.uuid4()

    response = client.post(
        "/admin/allocations",
        json={
            "order_id": str(order_id),
            "assignments": [
                {"farmer_id": str(farmer_a), "assigned_quantity": 60},
                {"farmer_id": str(farmer_b), "assigned_quantity": 40},
            ],
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Created 2 delivery assignments"
    assert body["data"]["total_assigned"] == 100
    assert body["data"]["remaining_quantity"] == 20

    called_order_id, assignments = mock_svc.allocate.call_args.args
    assert called_order_id == order_id
    assert [a.farmer_id for a in assignments] == [farmer_a, farmer_b]
    assert mock_svc.allocate.call_args.kwargs == {"admin_id": _admin.id}


def test_allocate_requires_at_least_one_row():
    response = client.post(
        "/admin/allocations",
        json={"order_id": str(uuid.uuid4()), "assignments": []},
    )
    assert response.status_code == 422


@patch("farmlink.modules.allocation.router.AllocationService")
def test_update_assignment(mock_svc_cls):
    assignment = _make_mock_assignment(quantity=25)
    mock_svc = AsyncMock()
    mock_svc.update_assignment.return_value = assignment
    mock_svc_cls.return_value = mock_svc

    response = client.put(f"/admin/allocations/{assignment.id}", json={"assigned_quantity": 25})
    assert response.status_code == 200
    assert response.json()["data"]["assigned_quantity"] == 25
    mock_svc.update_assignment.assert_awaited_once_with(assignment.id, 25, admin_id=_admin.id)


@patch("farmlink.modules.allocation.router.AllocationService")
def test_delete_assignment(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc_cls.return_value = mock_svc
    assignment_id = uuid.uuid4()

    response = client.delete(f"/admin/allocations/{assignment_id}")
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": None,
        "message": "Assignment deleted successfully",
    }
    mock_svc.delete_assignment.assert_awaited_once_with(assignment_id, admin_id=_admin.id)


@patch("farmlink.modules.allocation.router.AllocationService")
def test_allocation_overview(mock_svc_cls):
    mock_svc = AsyncMock()
    mock_svc.allocation_overview.return_value = AllocationOverview(
        current_week_start=datetime(2024, 1, 15, tzinfo=UTC), orders=[], farmers=[]
    )
    mock_svc_cls.return_value = mock_svc

    response = client.get("/admin/allocations")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["orders"] == []
    assert data["farmers"] == []
