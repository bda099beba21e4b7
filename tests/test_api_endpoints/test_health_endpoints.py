"""
Unit Tests for Health Endpoints
===============================
Basic health check and dependency health check.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ngo_portal.api.health_endpoints import router


# ============================================================================
# TEST SETUP
# ============================================================================


@pytest.fixture
def health_client():
    """Health router mounted on a bare app, no lifespan."""
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


# ============================================================================
# BASIC HEALTH CHECK
# ============================================================================


class TestHealthCheck:
    def test_health_check_returns_version(self, health_client):
        response = health_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data


# ============================================================================
# DEPENDENCY HEALTH CHECK
# ============================================================================


class TestDependencyHealth:
    def test_live_database_and_disabled_redis(self, client):
        response = client.get("/api/v1/health/dependencies")

        assert response.status_code == 200
        data = response.json()
        assert data["database"] is True
        assert data["redis"] is None
        assert data["status"] == "healthy"

    @patch("ngo_portal.api.health_endpoints._check_database", new_callable=AsyncMock)
    def test_database_down_is_reported_with_200(self, mock_check, health_client):
        mock_check.return_value = False

        response = health_client.get("/api/v1/health/dependencies")

        assert response.status_code == 200
        assert response.json()["database"] is False
        assert response.json()["status"] == "unhealthy"

    @patch("ngo_portal.api.health_endpoints._check_redis", new_callable=AsyncMock)
    @patch("ngo_portal.api.health_endpoints._check_database", new_callable=AsyncMock)
    def test_redis_checked_when_rate_limiting_enabled(
        self, mock_database, mock_redis, health_client
    ):
        mock_database.return_value = True
        mock_redis.return_value = False

        with patch("ngo_portal.api.health_endpoints.settings") as mock_settings:
            mock_settings.rate_limit_enabled = True
            response = health_client.get("/api/v1/health/dependencies")

        assert response.json()["redis"] is False
        assert response.json()["status"] == "unhealthy"
