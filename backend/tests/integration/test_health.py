"""
Integration Tests for Health Check Endpoints

Run with: pytest tests/integration/test_health.py -v
"""

import pytest


class TestBasicHealthEndpoint:
    """Test the basic health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy_status(self, test_client) -> None:
        response = await test_client.get("/api/health")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["service"] == "Study Pace"


class TestDetailedHealthEndpoint:
    """Test the detailed health check endpoint with dependency checks."""

    @pytest.mark.asyncio
    async def test_detailed_health_checks_database(self, test_client) -> None:
        response = await test_client.get("/api/health/detailed")
        data = response.json()

        assert response.status_code == 200
        assert data["dependencies"]["database"]["status"] == "healthy"
        assert data["status"] == "healthy"
        assert data["timezone"] == "UTC"
