"""
Session Gate
------------
ASGI middleware that guards dashboard pages and role-restricted APIs.

For every request under a prefix listed in ``ACCESS_POLICY`` the gate:
1. reads the access token (``Authorization: Bearer`` first, then the
   ``accessToken`` cookie);
2. when that is missing or expired, makes one attempt to rotate the
   ``refreshToken`` cookie and, on success, sets the new cookies on the
   outgoing response;
3. checks the role against the longest matching prefix and either forwards
   the request with ``request.state.user`` set, redirects pages to the login
   page, or answers API calls with a JSON 401/403.

Requests outside the policy pass straight through.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, FrozenSet, Optional, Tuple

from fastapi import status
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.types import ASGIApp

from ngo_portal.auth.jwt_auth_token_service import (
    refresh_access_token,
    verify_access_token,
)
from ngo_portal.auth.session_cookies import (
    ACCESS_TOKEN_COOKIE,
    LOGIN_PATH,
    REFRESH_TOKEN_COOKIE,
    home_for_role,
    set_session_cookies,
)
from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.core.exceptions import AuthenticationError
from ngo_portal.core.logger_setup import security_logger
from ngo_portal.models.auth_models import AuthTokenPayload, RefreshedSession
from ngo_portal.models.db_tables import UserRole

PAGE = "page"
API = "api"

ALL_ROLES = frozenset(UserRole)


@dataclass(frozen=True)
class AccessRule:
    prefix: str
    allowed_roles: FrozenSet[UserRole]
    surface: str

    def matches(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")


ACCESS_POLICY: Tuple[AccessRule, ...] = (
    AccessRule("/dashboard/admin", frozenset({UserRole.ADMIN}), PAGE),
    AccessRule(
        "/dashboard/volunteer", frozenset({UserRole.VOLUNTEER, UserRole.ADMIN}), PAGE
    ),
    AccessRule(
        "/dashboard/sponsor", frozenset({UserRole.SPONSOR, UserRole.ADMIN}), PAGE
    ),
    AccessRule("/dashboard", ALL_ROLES, PAGE),
    AccessRule("/api/admin", frozenset({UserRole.ADMIN}), API),
    AccessRule("/api/dashboard/admin", frozenset({UserRole.ADMIN}), API),
    AccessRule(
        "/api/dashboard/volunteer",
        frozenset({UserRole.VOLUNTEER, UserRole.ADMIN}),
        API,
    ),
    AccessRule(
        "/api/dashboard/sponsor", frozenset({UserRole.SPONSOR, UserRole.ADMIN}), API
    ),
)

DASHBOARD_ROOT = "/dashboard"

RefreshFunction = Callable[[str], Awaitable[RefreshedSession]]


def match_rule(path: str) -> Optional[AccessRule]:
    """Longest matching prefix in ``ACCESS_POLICY``, or None."""
    candidates = [rule for rule in ACCESS_POLICY if rule.matches(path)]
    return max(candidates, key=lambda rule: len(rule.prefix), default=None)


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


class SessionGate(BaseHTTPMiddleware):
    """Authenticates, silently refreshes and authorizes protected paths."""

    def __init__(
        self,
        app: ASGIApp,
        database_manager: Optional[DatabaseManager] = None,
        refresh: Optional[RefreshFunction] = None,
    ):
        super().__init__(app)
        self.database_manager = database_manager
        self._refresh = refresh

    async def refresh(self, refresh_token: str) -> RefreshedSession:
        if self._refresh is not None:
            return await self._refresh(refresh_token)
        return await refresh_access_token(refresh_token, self.database_manager)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path.rstrip("/") or "/"
        rule = match_rule(path)
        if rule is None:
            return await call_next(request)

        payload = verify_access_token(_bearer_token(request)) or verify_access_token(
            request.cookies.get(ACCESS_TOKEN_COOKIE)
        )

        refreshed: Optional[RefreshedSession] = None
        if payload is None:
            refreshed = await self._try_refresh(request)
            if refreshed is not None:
                payload = refreshed.payload

        if payload is None:
            return self._deny(rule, status.HTTP_401_UNAUTHORIZED, "Authentication required")

        if path == DASHBOARD_ROOT:
            response: Response = RedirectResponse(
                home_for_role(payload.role), status_code=status.HTTP_302_FOUND
            )
        elif payload.role not in rule.allowed_roles:
            security_logger.warning(
                f"Role {payload.role.value} of user {payload.user_id} "
                f"not allowed on {path}"
            )
            response = self._deny(rule, status.HTTP_403_FORBIDDEN, "Insufficient permissions")
        else:
            request.state.user = payload
            with logger.contextualize(user=str(payload.user_id)):
                response = await call_next(request)

        if refreshed is not None:
            # The presented refresh token is revoked now; hand out the replacement
            set_session_cookies(
                response,
                refreshed.access_token,
                refreshed.refresh_token,
                refreshed.payload.role,
            )
        return response

    async def _try_refresh(self, request: Request) -> Optional[RefreshedSession]:
        refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
        if not refresh_token:
            return None
        try:
            refreshed = await self.refresh(refresh_token)
        except AuthenticationError as e:
            logger.info(f"Silent refresh failed on {request.url.path}: {e.message}")
            return None
        logger.debug(f"Silent refresh succeeded for user {refreshed.payload.user_id}")
        return refreshed

    @staticmethod
    def _deny(rule: AccessRule, status_code: int, message: str) -> Response:
        if rule.surface == API:
            return JSONResponse({"error": message}, status_code=status_code)
        return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_302_FOUND)


def current_identity(request: Request) -> Optional[AuthTokenPayload]:
    """Identity the gate attached to ``request``, if any."""
    identity = getattr(request.state, "user", None)
    return identity if isinstance(identity, AuthTokenPayload) else None
