"""
Authentication Module
---------------------
Token issuance, session gating and role-based access control.

Core Components:
- jwt_auth_token_service: access tokens, refresh-token rotation, credentials
- session_gate: middleware enforcing the path-prefix role policy
- session_cookies: the accessToken / refreshToken / userRole cookies
- auth_dependencies: FastAPI dependencies for API routes

Usage:
    from ngo_portal.auth import require_admin

    @router.get("/api/admin/things")
    async def list_things(user: AuthTokenPayload = Depends(require_admin)):
        ...
"""

from ngo_portal.auth.auth_dependencies import (
    RoleChecker,
    get_current_user,
    get_optional_user,
    require_admin,
    require_authenticated,
    require_sponsor,
    require_volunteer,
)
from ngo_portal.auth.jwt_auth_token_service import (
    authenticate_user,
    create_access_token,
    decode_token,
    ensure_signing_secret,
    generate_refresh_token,
    hash_refresh_token,
    issue_session,
    refresh_access_token,
    remove_refresh_token,
    store_refresh_token,
    verify_access_token,
)
from ngo_portal.auth.session_gate import ACCESS_POLICY, SessionGate, match_rule
from ngo_portal.models.auth_models import AuthTokenPayload

__all__ = [
    # Dependencies
    "RoleChecker",
    "get_current_user",
    "get_optional_user",
    "require_admin",
    "require_authenticated",
    "require_sponsor",
    "require_volunteer",
    # Token service
    "authenticate_user",
    "create_access_token",
    "decode_token",
    "ensure_signing_secret",
    "generate_refresh_token",
    "hash_refresh_token",
    "issue_session",
    "refresh_access_token",
    "remove_refresh_token",
    "store_refresh_token",
    "verify_access_token",
    # Gate
    "ACCESS_POLICY",
    "SessionGate",
    "match_rule",
    # Models
    "AuthTokenPayload",
]
