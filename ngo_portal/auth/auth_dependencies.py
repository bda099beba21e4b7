"""
FastAPI Authentication Dependencies
-----------------------------------
Dependencies for access-token authentication and role-based authorization
on API routes.

The session gate already authenticates requests under protected prefixes
and leaves the identity on ``request.state.user``; these dependencies reuse
it and fall back to reading the token themselves (Bearer header first, then
the ``accessToken`` cookie) so routes stay protected when mounted without
the gate.
"""

from typing import Iterable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger

from ngo_portal.auth.jwt_auth_token_service import verify_access_token
from ngo_portal.auth.session_cookies import ACCESS_TOKEN_COOKIE
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.db_tables import UserRole

# OAuth2 scheme for extracting Bearer tokens from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login",
    auto_error=False,  # Missing token is handled below
)


async def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[AuthTokenPayload]:
    """Identity for the request, or None when unauthenticated."""
    identity = getattr(request.state, "user", None)
    if isinstance(identity, AuthTokenPayload):
        return identity

    payload = verify_access_token(token) or verify_access_token(
        request.cookies.get(ACCESS_TOKEN_COOKIE)
    )
    if payload is not None:
        request.state.user = payload
    return payload


async def get_current_user(
    payload: Optional[AuthTokenPayload] = Depends(get_optional_user),
) -> AuthTokenPayload:
    """
    Require an authenticated identity.

    Raises:
        HTTPException 401: If no valid access token was presented
    """
    if payload is None:
        logger.warning("Missing or invalid access token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


class RoleChecker:
    """
    Dependency class for role-based authorization.

    Usage:
        require_admin = RoleChecker([UserRole.ADMIN])
        @router.get("/admin-only", dependencies=[Depends(require_admin)])
    """

    def __init__(self, allowed_roles: Iterable[UserRole]):
        # Raises ValueError for unknown roles
        self.allowed_roles = frozenset(UserRole(role) for role in allowed_roles)

    def __call__(
        self, payload: AuthTokenPayload = Depends(get_current_user)
    ) -> AuthTokenPayload:
        """
        Raises:
            HTTPException 403: If user's role is not authorized
        """
        if payload.role not in self.allowed_roles:
            logger.warning(
                f"Access denied for user {payload.user_id} with role {payload.role.value}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return payload


require_admin = RoleChecker([UserRole.ADMIN])
"""ADMIN only. Back-office endpoints."""

require_volunteer = RoleChecker([UserRole.VOLUNTEER, UserRole.ADMIN])
"""Volunteer dashboard; admins may view it too."""

require_sponsor = RoleChecker([UserRole.SPONSOR, UserRole.ADMIN])
"""Sponsor dashboard; admins may view it too."""

require_authenticated = RoleChecker(list(UserRole))
"""Any signed-in role."""
