"""
Session Cookies
---------------
Writes and clears the three session cookies: ``accessToken`` and
``refreshToken`` (HTTP-only) and ``userRole`` (script-readable hint).
"""

from starlette.responses import Response

from ngo_portal.core.config_manager import settings
from ngo_portal.models.db_tables import UserRole

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"
USER_ROLE_COOKIE = "userRole"

ROLE_HOME = {
    UserRole.ADMIN: "/dashboard/admin",
    UserRole.SPONSOR: "/dashboard/sponsor",
    UserRole.VOLUNTEER: "/dashboard/volunteer",
}
LOGIN_PATH = "/auth/login"


def home_for_role(role) -> str:
    """Dashboard for ``role``; unknown roles go back to the login page."""
    try:
        return ROLE_HOME[UserRole(role)]
    except ValueError:
        return LOGIN_PATH


def set_session_cookies(
    response: Response, access_token: str, refresh_token: str, role: UserRole
) -> None:
    common = {
        "path": "/",
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
    }
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=settings.access_token_max_age_seconds,
        httponly=True,
        **common,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=settings.refresh_token_max_age_seconds,
        httponly=True,
        **common,
    )
    response.set_cookie(
        USER_ROLE_COOKIE,
        UserRole(role).value,
        max_age=settings.refresh_token_max_age_seconds,
        httponly=False,
        **common,
    )


def clear_session_cookies(response: Response) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, USER_ROLE_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )
