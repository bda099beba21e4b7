"""
FastAPI Application Entry Point
-------------------------------
Application factory: logging, lifecycle, error handlers, middleware and routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ngo_portal.api import (
    admin_audit_endpoints,
    admin_blog_endpoints,
    admin_campaign_endpoints,
    admin_contact_endpoints,
    admin_export_endpoints,
    admin_gallery_endpoints,
    admin_notification_endpoints,
    admin_setting_endpoints,
    admin_user_endpoints,
    auth_endpoints,
    dashboard_endpoints,
    health_endpoints,
    public_endpoints,
    websocket_endpoints,
)
from ngo_portal.auth.jwt_auth_token_service import ensure_signing_secret
from ngo_portal.auth.session_gate import SessionGate
from ngo_portal.core.config_manager import settings
from ngo_portal.core.database_connection import db_manager
from ngo_portal.core.exceptions import RateLimitedError, ServiceError
from ngo_portal.core.logger_setup import configure_logger
from ngo_portal.core.redis_connection import redis_manager
from ngo_portal.core.startup_diagnostics import (
    display_service_info,
    display_startup_failure,
    verify_database_connectivity,
    verify_redis_connectivity,
)
from ngo_portal.db_services.refresh_tokens_service import RefreshTokensService
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.db_tables import UserRole
from ngo_portal.realtime.notification_broadcaster import NotificationBroadcaster


async def seed_admin_from_settings() -> None:
    """Create the single ADMIN from ADMIN_EMAIL/ADMIN_PASSWORD if none exists yet."""
    if not (settings.admin_email and settings.admin_password):
        return

    users = UsersService()
    if await users.admin_exists():
        logger.debug("Admin account already present, skipping seed")
        return
    try:
        admin = await users.create_user(
            email=settings.admin_email,
            password=settings.admin_password,
            first_name="Site",
            last_name="Administrator",
            role=UserRole.ADMIN,
            verified=True,
        )
        logger.info(f"Seeded admin account {admin.email}")
    except ValueError as e:
        logger.warning(f"Admin seed skipped: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager; fails fast when a dependency is unusable."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")

    ensure_signing_secret()

    await db_manager.initialize()
    database_status = await verify_database_connectivity()
    if settings.rate_limit_enabled:
        redis_manager.initialize()
    redis_status = await verify_redis_connectivity()

    statuses = [database_status, redis_status]
    failed_services = [s for s in statuses if s.failed]
    if failed_services:
        display_startup_failure(failed_services)
        await db_manager.close()
        await redis_manager.close()
        raise RuntimeError(
            f"Application startup failed: {len(failed_services)} service(s) unavailable"
        )

    await db_manager.create_schema()
    purged = await RefreshTokensService().purge_expired()
    if purged:
        logger.info(f"Purged {purged} expired or revoked refresh token(s)")
    await seed_admin_from_settings()

    broadcaster = NotificationBroadcaster()
    await broadcaster.initialize(app)

    display_service_info(statuses)
    logger.info("[SUCCESS] Application startup complete")

    yield

    logger.info("Shutting down application")
    try:
        await broadcaster.shutdown()
        await redis_manager.close()
        await db_manager.close()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================================================
# ERROR HANDLERS
# ============================================================================
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        # Server-side faults are logged in full and hidden from the caller
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Internal server error"},
        )

    headers = None
    if isinstance(exc, RateLimitedError) and isinstance(exc.details, dict):
        headers = {"Retry-After": str(exc.details.get("retry_after_seconds", ""))}
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder({"error": exc.message, "details": exc.details}),
        headers=headers,
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation failed", "details": exc.errors()}),
    )


# ============================================================================
# APPLICATION FACTORY
# ============================================================================
def create_app() -> FastAPI:
    configure_logger()

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="NGO portal: sessions, role dashboards, back office and live notifications",
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        swagger_ui_parameters={"displayRequestDuration": True},
    )

    application.add_exception_handler(ServiceError, service_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)

    # Middleware added last runs first: CORS wraps the session gate
    application.add_middleware(SessionGate)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_endpoints.router)
    application.include_router(auth_endpoints.router)
    application.include_router(public_endpoints.router)
    application.include_router(dashboard_endpoints.router)
    application.include_router(dashboard_endpoints.pages_router)
    application.include_router(admin_user_endpoints.router)
    application.include_router(admin_campaign_endpoints.router)
    application.include_router(admin_blog_endpoints.router)
    application.include_router(admin_gallery_endpoints.router)
    application.include_router(admin_contact_endpoints.router)
    application.include_router(admin_setting_endpoints.router)
    application.include_router(admin_notification_endpoints.router)
    application.include_router(admin_audit_endpoints.router)
    application.include_router(admin_export_endpoints.router)
    application.include_router(websocket_endpoints.router)

    @application.get("/")
    async def root():
        """Root endpoint with basic information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": "/api/docs",
            "redoc": "/api/redoc",
            "openapi": "/api/openapi.json",
        }

    return application


app = create_app()
