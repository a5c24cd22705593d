"""Tests for the application factory: health check and the error envelope."""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from farmlink.app import create_app
from farmlink.config import settings
from farmlink.exceptions import OrderNotFoundException

app = create_app()


@app.get("/test/not-found")
async def _not_found():
    raise OrderNotFoundException("Order not found", details=[{"field": "order_id", "message": "unknown"}])


@app.get("/test/crash")
async def _crash():
    raise RuntimeError("boom")


client = TestClient(app, raise_server_exceptions=False)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "environment": settings.environment}


def test_request_id_is_echoed():
    response = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_domain_error_envelope():
    response = client.get("/test/not-found", headers={"X-Request-ID": "req-1"})
    assert response.status_code == 404
    assert response.json() == {
        "error": "ORDER_NOT_FOUND",
        "message": "Order not found",
        "details": [{"field": "order_id", "message": "unknown"}],
        "requestId": "req-1",
    }


def test_validation_error_envelope():
    response = client.post("/api/v1/auth/login", json={})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert {d["field"] for d in body["details"]} == {"body.email_or_phone", "body.password"}


def test_missing_token_is_unauthorized():
    response = client.get("/api/v1/farmers/performance")
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHORIZED"


def test_unhandled_error_includes_stack_outside_production():
    response = client.get("/test/crash")
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "INTERNAL_ERROR"
    assert "RuntimeError: boom" in body["stack"]


def test_unhandled_error_hides_stack_in_production():
    with patch.object(settings, "environment", "production"):
        response = client.get("/test/crash")
    assert response.status_code == 500
    assert "stack" not in response.json()
