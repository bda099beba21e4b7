"""
Health Check Endpoints
---------------------
Health monitoring endpoints for the service and its dependencies.
Provides status checks for the database and, when login rate limiting is
enabled, Redis.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from loguru import logger
from sqlalchemy import text

from ngo_portal.core.config_manager import settings
from ngo_portal.core.database_connection import db_manager
from ngo_portal.core.redis_connection import redis_manager
from ngo_portal.models.response_models import DependencyHealth, Health, HealthStatus

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("", response_model=HealthStatus)
async def health_check():
    """
    Basic health check endpoint.

    Returns:
        HealthStatus: Service status and version
    """
    logger.debug("Health check requested")

    return HealthStatus(
        status=Health.HEALTHY,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
    )


@router.get("/dependencies", response_model=DependencyHealth, status_code=200)
async def check_dependencies():
    """
    Check health of the service dependencies.

    Always answers 200; an unhealthy component is reported in the body so
    monitoring can decide how critical it is. ``redis`` is null when rate
    limiting is disabled.
    """
    logger.debug("Dependency health check requested")

    database_healthy = await _check_database()
    redis_healthy = await _check_redis() if settings.rate_limit_enabled else None

    all_healthy = database_healthy and redis_healthy is not False
    if not all_healthy:
        logger.warning(
            f"Infrastructure health check detected issues: "
            f"database={database_healthy}, redis={redis_healthy}"
        )
    else:
        logger.info("All infrastructure components healthy")

    return DependencyHealth(
        database=database_healthy,
        redis=redis_healthy,
        status=Health.HEALTHY if all_healthy else Health.UNHEALTHY,
        timestamp=datetime.now(timezone.utc),
    )


async def _check_database() -> bool:
    try:
        async with db_manager.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


async def _check_redis() -> bool:
    try:
        return await redis_manager.ping()
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return False
