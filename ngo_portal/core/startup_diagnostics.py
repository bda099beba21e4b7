"""
Startup Diagnostics Module
-------------------------
Service connectivity verification and error reporting during application startup.
Gives clear, actionable messages when the database or Redis is unavailable.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger

from ngo_portal.core.config_manager import settings
from ngo_portal.core.database_connection import DatabaseManager, db_manager
from ngo_portal.core.redis_connection import RedisManager, redis_manager


@dataclass
class ServiceStatus:
    """Service connection status with detailed error information."""

    name: str
    status: str  # "connected", "failed", "skipped"
    error_message: Optional[str] = None
    suggestion: Optional[str] = None
    connection_details: Optional[Dict[str, str]] = None

    @property
    def failed(self) -> bool:
        return self.status == "failed"


def _database_details() -> Dict[str, str]:
    if settings.database_url:
        return {"url": settings.database_url.split("://")[0] + "://..."}
    return {
        "host": settings.database_host,
        "port": str(settings.database_port),
        "database": settings.database_name,
    }


def _redis_details() -> Dict[str, str]:
    return {
        "host": settings.redis_host,
        "port": str(settings.redis_port),
        "database": str(settings.redis_db),
    }


def display_startup_failure(failed_services: List[ServiceStatus]) -> None:
    """Print the formatted startup failure banner."""
    border = "═" * 80
    print("\n" + border)
    print("[FATAL ERROR] APPLICATION STARTUP FAILED")
    print(border)

    for service in failed_services:
        print(f"\n[FATAL ERROR] {service.name}: {service.status.upper()}")
        print(f"   Error: {service.error_message}")

        if service.connection_details:
            print("   Connection Details:")
            for key, value in service.connection_details.items():
                print(f"     • {key}: {value}")

        if service.suggestion:
            print(f"   >> Suggestion: {service.suggestion}")

    print("\n" + border)
    print("Please fix the issues above and restart the application.")
    print(border + "\n")


def display_service_info(statuses: List[ServiceStatus]) -> None:
    """Print endpoint URLs and dependency status once startup succeeded."""
    border_line = "═" * 80
    header_line = "─" * 80
    local_api_base = f"http://localhost:{settings.fastapi_port}"

    print("\n" + border_line)
    print(f"{settings.app_name.upper()} - SERVICE ENDPOINTS")
    print(border_line)
    print(f"{'Service':<20} | {'URL':<57}")
    print(header_line)
    print(f"{'Main API':<20} | {local_api_base + '/':<57}")
    print(f"{'API Documentation':<20} | {local_api_base + '/api/docs':<57}")
    print(f"{'Health Check':<20} | {local_api_base + '/api/v1/health':<57}")
    print(f"{'Notifications WS':<20} | {'ws://localhost:' + str(settings.fastapi_port) + '/api/ws/notifications':<57}")
    print(header_line)

    print("\nDEPENDENCIES")
    print(header_line)
    print(f"{'Service':<20} | {'Status':<57}")
    print(header_line)
    for service in statuses:
        print(f"{service.name:<20} | {service.status:<57}")
    print(border_line + "\n")

    logger.info("Service endpoints and connection information displayed")


async def verify_database_connectivity(
    manager: Optional[DatabaseManager] = None,
) -> ServiceStatus:
    """Run a round trip against the database and describe the outcome."""
    manager = manager or db_manager
    try:
        if await manager.ping():
            return ServiceStatus(
                name="Database", status="connected", connection_details=_database_details()
            )
        return ServiceStatus(
            name="Database",
            status="failed",
            error_message="Connection test query failed",
            suggestion="Check that the database is running and the credentials in .env are correct",
            connection_details=_database_details(),
        )
    except RuntimeError as e:
        return ServiceStatus(
            name="Database",
            status="failed",
            error_message=str(e),
            suggestion="Initialize the database manager before running diagnostics",
        )


async def verify_redis_connectivity(manager: Optional[RedisManager] = None) -> ServiceStatus:
    """Ping Redis; reported as skipped when login rate limiting is disabled."""
    if not settings.rate_limit_enabled:
        return ServiceStatus(name="Redis", status="skipped")

    manager = manager or redis_manager
    if await manager.ping():
        return ServiceStatus(
            name="Redis", status="connected", connection_details=_redis_details()
        )
    return ServiceStatus(
        name="Redis",
        status="failed",
        error_message="Redis server did not respond to ping",
        suggestion=(
            f"Start Redis with: redis-server, check it is reachable on "
            f"{settings.redis_host}:{settings.redis_port}, or set RATE_LIMIT_ENABLED=false"
        ),
        connection_details=_redis_details(),
    )
