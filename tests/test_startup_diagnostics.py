"""
Startup Diagnostics Tests
-------------------------
Connectivity checks and the console banners printed during startup.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.core.startup_diagnostics import (
    ServiceStatus,
    display_service_info,
    display_startup_failure,
    verify_database_connectivity,
    verify_redis_connectivity,
)


class TestServiceStatus:
    def test_failed_property(self):
        assert ServiceStatus(name="Database", status="failed").failed is True
        assert ServiceStatus(name="Redis", status="skipped").failed is False


class TestDisplay:
    def test_display_startup_failure(self, capsys):
        # Arrange
        failed = [
            ServiceStatus(
                name="Database",
                status="failed",
                error_message="Connection refused",
                suggestion="Start PostgreSQL",
                connection_details={"host": "db", "port": "5432"},
            )
        ]

        # Act
        display_startup_failure(failed)

        # Assert
        output = capsys.readouterr().out
        assert "APPLICATION STARTUP FAILED" in output
        assert "Database: FAILED" in output
        assert "Connection refused" in output
        assert "host: db" in output
        assert "Suggestion: Start PostgreSQL" in output

    def test_display_service_info(self, capsys):
        display_service_info(
            [
                ServiceStatus(name="Database", status="connected"),
                ServiceStatus(name="Redis", status="skipped"),
            ]
        )

        output = capsys.readouterr().out
        assert "/api/ws/notifications" in output
        assert "/api/v1/health" in output
        assert "skipped" in output


class TestVerifyDatabase:
    @pytest.mark.asyncio
    async def test_connected(self, database_manager):
        status = await verify_database_connectivity(database_manager)

        assert status.status == "connected"
        assert status.connection_details

    @pytest.mark.asyncio
    async def test_ping_failure(self):
        manager = MagicMock()
        manager.ping = AsyncMock(return_value=False)

        status = await verify_database_connectivity(manager)

        assert status.failed
        assert status.error_message == "Connection test query failed"
        assert status.suggestion

    @pytest.mark.asyncio
    async def test_uninitialized_manager_reports_failure(self):
        # ping() swallows the RuntimeError and answers False
        status = await verify_database_connectivity(DatabaseManager())

        assert status.failed


class TestVerifyRedis:
    @pytest.mark.asyncio
    async def test_skipped_when_rate_limiting_disabled(self):
        manager = MagicMock()
        manager.ping = AsyncMock(return_value=False)

        status = await verify_redis_connectivity(manager)

        assert status.status == "skipped"
        manager.ping.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("ngo_portal.core.startup_diagnostics.settings")
    async def test_ping_failure_when_enabled(self, mock_settings):
        # Arrange
        mock_settings.rate_limit_enabled = True
        mock_settings.redis_host = "cache"
        mock_settings.redis_port = 6379
        mock_settings.redis_db = 0
        manager = MagicMock()
        manager.ping = AsyncMock(return_value=False)

        # Act
        status = await verify_redis_connectivity(manager)

        # Assert
        assert status.failed
        assert "RATE_LIMIT_ENABLED=false" in status.suggestion
        assert status.connection_details == {"host": "cache", "port": "6379", "database": "0"}

    @pytest.mark.asyncio
    @patch("ngo_portal.core.startup_diagnostics.settings")
    async def test_connected_when_enabled(self, mock_settings):
        mock_settings.rate_limit_enabled = True
        manager = MagicMock()
        manager.ping = AsyncMock(return_value=True)

        status = await verify_redis_connectivity(manager)

        assert status.status == "connected"
