"""
ProductHub Backend — Application-Level Tests
==============================================

Health endpoint, request id propagation and the error envelope.
"""

import pytest


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"]
        assert body["uptime_seconds"] >= 0


class TestRequestId:
    @pytest.mark.asyncio
    async def test_generated_when_absent(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_error_envelope_carries_request_id(self, test_client):
        response = await test_client.get("/products/getAll", headers={"X-Request-ID": "trace-401"})
        assert response.status_code == 401
        assert response.json()["request_id"] == "trace-401"

    @pytest.mark.asyncio
    async def test_oversized_client_id_replaced(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "x" * 200})
        assert len(response.headers["X-Request-ID"]) == 8


class TestErrorEnvelope:
    @pytest.mark.asyncio
    async def test_validation_error_shape(self, test_client):
        response = await test_client.post("/users/add", json={"email": "bad", "password": "rahasia123"})
        assert response.status_code == 400
        body = response.json()
        assert set(body) >= {"status", "error", "message", "data", "request_id"}
        assert body["status"] == 400
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/nope")
        assert response.status_code == 404
