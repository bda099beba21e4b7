"""
Authentication Endpoints
------------------------
Registration, login, token refresh, logout and identity lookup.

Login and refresh answer with the three session cookies; logout clears them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from loguru import logger

from ngo_portal.api.api_helpers import service_errors
from ngo_portal.auth.auth_dependencies import get_current_user
from ngo_portal.auth.jwt_auth_token_service import (
    authenticate_user,
    issue_session,
    refresh_access_token,
    remove_refresh_token,
)
from ngo_portal.auth.session_cookies import (
    REFRESH_TOKEN_COOKIE,
    clear_session_cookies,
    home_for_role,
    set_session_cookies,
)
from ngo_portal.core.exceptions import AuthenticationError
from ngo_portal.core.rate_limiter import LoginRateLimiter
from ngo_portal.core.side_effects import side_effects
from ngo_portal.db_services.notifications_service import NotificationsService
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.auth_models import (
    AuthIdentityResponse,
    AuthLoginRequest,
    AuthLoginResponse,
    AuthMessageResponse,
    AuthRefreshRequest,
    AuthRegisterRequest,
    AuthTokenPayload,
    AuthUserSummary,
)
from ngo_portal.models.db_tables import NotificationType, UserRole
from ngo_portal.models.response_models import UserResponse
from ngo_portal.realtime.notification_broadcaster import (
    NotificationBroadcaster,
    get_notification_broadcaster,
)


# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

# Self-service registration never creates admins
REGISTRATION_ROLES = {
    "volunteer": UserRole.VOLUNTEER,
    "sponsor": UserRole.SPONSOR,
}


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (
        request.client.host if request.client else "unknown"
    )


# ============================================================================
#                               REGISTER
# ============================================================================
@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a volunteer or sponsor account",
)
async def register(
    payload: AuthRegisterRequest,
    broadcaster: Optional[NotificationBroadcaster] = Depends(get_notification_broadcaster),
):
    """
    Create a VOLUNTEER or SPONSOR account.

    Raises:
        HTTPException 400: Unknown userType, invalid input or email taken
    """
    logger.info(f"Registration attempt: email={payload.email}, type={payload.user_type}")

    with service_errors("register user"):
        role = REGISTRATION_ROLES.get(payload.user_type)
        if role is None:
            raise ValueError("Invalid user type")

        user = await UsersService().create_user(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            role=role,
        )

    await side_effects.run(
        "notify:registration",
        NotificationsService(broadcaster=broadcaster).create_and_broadcast_notification(
            "New registration",
            f"{user.first_name} {user.last_name} registered as {role.value.lower()}",
            NotificationType.INFO,
        ),
    )

    logger.info(f"User registered: user_id={user.id}, role={role.value}")
    return {
        "message": "User registered successfully",
        "user": UserResponse.model_validate(user).model_dump(mode="json", by_alias=True),
    }


# ============================================================================
#                                 LOGIN
# ============================================================================
@router.post(
    "/login",
    response_model=AuthLoginResponse,
    summary="Log in with email and password",
)
async def login(payload: AuthLoginRequest, request: Request, response: Response):
    """
    Verify credentials, issue the session and set the session cookies.

    Raises:
        HTTPException 401: Wrong email or password (indistinguishable)
        HTTPException 429: Too many attempts for this address and email
    """
    limiter = LoginRateLimiter()
    address = client_address(request)
    await limiter.hit(address, payload.email)

    with service_errors("log in"):
        user = await authenticate_user(payload.email, payload.password)
        if user is None:
            raise AuthenticationError(
                "Invalid credentials", details="Incorrect email or password"
            )
        session = await issue_session(user)

    await limiter.reset(address, payload.email)
    set_session_cookies(response, session.access_token, session.refresh_token, user.role)

    return AuthLoginResponse(
        user=AuthUserSummary(
            id=user.id,
            name=f"{user.first_name} {user.last_name}",
            email=user.email,
            role=user.role,
        ),
        token=session.access_token,
        redirect_url=home_for_role(user.role),
    )


# ============================================================================
#                                REFRESH
# ============================================================================
@router.post(
    "/refresh",
    response_model=AuthMessageResponse,
    summary="Rotate the refresh token and mint a new access token",
)
async def refresh(
    request: Request,
    response: Response,
    payload: Optional[AuthRefreshRequest] = None,
):
    """
    The refresh token is read from the refreshToken cookie, or from the body.

    Raises:
        HTTPException 401: Missing, unknown, revoked or expired refresh token
    """
    token = request.cookies.get(REFRESH_TOKEN_COOKIE) or (
        payload.refresh_token if payload else None
    )

    with service_errors("refresh token"):
        session = await refresh_access_token(token)

    set_session_cookies(
        response, session.access_token, session.refresh_token, session.payload.role
    )
    return AuthMessageResponse(message="Token refreshed successfully")


# ============================================================================
#                                 LOGOUT
# ============================================================================
@router.post("/logout", response_model=AuthMessageResponse, summary="Log out")
async def logout(
    request: Request,
    response: Response,
    payload: Optional[AuthRefreshRequest] = None,
):
    """Revoke the refresh token if one is presented and clear the cookies."""
    token = request.cookies.get(REFRESH_TOKEN_COOKIE) or (
        payload.refresh_token if payload else None
    )

    with service_errors("log out"):
        await remove_refresh_token(token)

    clear_session_cookies(response)
    return AuthMessageResponse(message="Logout successful")


# ============================================================================
#                                   ME
# ============================================================================
@router.get("/me", response_model=AuthIdentityResponse, summary="Current identity")
async def me(current_user: AuthTokenPayload = Depends(get_current_user)):
    return AuthIdentityResponse(
        user_id=current_user.user_id,
        email=current_user.email,
        role=current_user.role,
        expires_at=current_user.exp,
    )
