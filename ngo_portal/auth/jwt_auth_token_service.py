"""
Token Service
-------------
Access token and refresh token operations.

Access tokens are short-lived HS256 JWTs carrying {user_id, email, role}
and are verified by signature and expiry alone. Refresh tokens are opaque
random strings; only their SHA-256 digest is stored, and each one is
single-use: exchanging it revokes it and issues a replacement.

Security notes:
- python-jose[cryptography] for signing and verification
- token type claim checked on every decode
- the signing secret is mandatory; placeholder values are rejected
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
from uuid import UUID

from jose import JWTError, jwt
from loguru import logger

from ngo_portal.core.config_manager import PLACEHOLDER_JWT_SECRETS, settings
from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.core.exceptions import AuthenticationError, ConfigurationError
from ngo_portal.core.logger_setup import security_logger
from ngo_portal.db_services.refresh_tokens_service import RefreshTokensService
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.auth_models import (
    AuthTokenPayload,
    IssuedSession,
    RefreshedSession,
)
from ngo_portal.models.db_tables import User, UserRole, utc_now
from ngo_portal.utils.password_hashing import PasswordHasher

ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ("user_id", "email", "role", "exp", "iat", "type")


# ============================================================================
# SIGNING SECRET
# ============================================================================


def ensure_signing_secret(secret: Optional[str] = None) -> str:
    """
    Return the configured signing secret.

    Raises:
        ConfigurationError: If the secret is unset, blank or a known placeholder
    """
    secret = settings.jwt_secret_key if secret is None else secret
    if not secret or not secret.strip():
        raise ConfigurationError("JWT_SECRET_KEY is not configured")
    if secret.strip().lower() in PLACEHOLDER_JWT_SECRETS:
        raise ConfigurationError("JWT_SECRET_KEY is set to a placeholder value")
    return secret


# ============================================================================
# ACCESS TOKENS
# ============================================================================


def create_access_token(
    user_id: Union[UUID, str],
    email: str,
    role: Union[UserRole, str],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: User's unique identifier
        email: User's email
        role: ADMIN, SPONSOR or VOLUNTEER
        expires_delta: Lifetime override (defaults to jwt_access_token_expire_minutes)

    Raises:
        ConfigurationError: If no usable signing secret is configured
        ValueError: If role is invalid
    """
    secret = ensure_signing_secret()
    role = UserRole(role)

    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )

    payload = {
        "user_id": str(user_id),
        "email": email,
        "role": role.value,
        "exp": expire,
        "iat": issued_at,
        "type": ACCESS_TOKEN_TYPE,
    }

    try:
        token: str = jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)
    except JWTError as e:
        logger.error(f"Failed to create access token: {e}")
        raise

    logger.debug(f"Access token created for user {user_id} with role {role.value}")
    return token


def decode_token(token: str) -> AuthTokenPayload:
    """
    Decode and validate an access token.

    Raises:
        JWTError: If signature or expiry is invalid
        ValueError: If the payload is malformed or not an access token
    """
    secret = ensure_signing_secret()
    try:
        payload: Dict[str, Any] = jwt.decode(
            token, secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.debug(f"JWT decode failed: {e}")
        raise

    missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
    if missing:
        raise ValueError(f"Token missing claims: {', '.join(missing)}")
    if payload["type"] != ACCESS_TOKEN_TYPE:
        raise ValueError(
            f"Token type mismatch. Expected '{ACCESS_TOKEN_TYPE}', got '{payload['type']}'"
        )

    try:
        return AuthTokenPayload(
            user_id=UUID(payload["user_id"]),
            email=payload["email"],
            role=UserRole(payload["role"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid token payload: {str(e)}")


def verify_access_token(token: Optional[str]) -> Optional[AuthTokenPayload]:
    """
    Return the decoded payload, or None for a missing, invalid or expired token.

    Absence of a token is the unauthenticated state, not an error.
    """
    if not token:
        return None
    try:
        return decode_token(token)
    except (JWTError, ValueError) as e:
        logger.debug(f"Access token rejected: {e}")
        return None


def get_token_expiration_seconds() -> int:
    """Access token lifetime in seconds; also the accessToken cookie max-age."""
    return settings.access_token_max_age_seconds


# ============================================================================
# REFRESH TOKENS
# ============================================================================


def generate_refresh_token() -> str:
    """Opaque URL-safe refresh token."""
    return secrets.token_urlsafe(48)


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _refresh_expiry() -> datetime:
    return utc_now() + timedelta(days=settings.jwt_refresh_token_expire_days)


async def store_refresh_token(
    user_id: Union[UUID, str],
    token: str,
    database_manager: Optional[DatabaseManager] = None,
) -> None:
    """Persist the hash of ``token`` with the configured refresh lifetime."""
    await RefreshTokensService(database_manager).store(
        user_id, hash_refresh_token(token), _refresh_expiry()
    )


async def issue_session(
    user: User, database_manager: Optional[DatabaseManager] = None
) -> IssuedSession:
    """Mint an access token and a stored refresh token for ``user``."""
    access_token = create_access_token(user.id, user.email, user.role)
    refresh_token = generate_refresh_token()
    await store_refresh_token(user.id, refresh_token, database_manager)

    logger.info(f"Session issued for user {user.id}")
    return IssuedSession(
        access_token=access_token,
        refresh_token=refresh_token,
        payload=decode_token(access_token),
    )


async def refresh_access_token(
    refresh_token: Optional[str],
    database_manager: Optional[DatabaseManager] = None,
) -> RefreshedSession:
    """
    Exchange a refresh token for a new access token and a rotated refresh token.

    The user is re-read so the new access token carries the current role.

    Raises:
        AuthenticationError: If the token is missing, unknown, revoked or expired
    """
    if not refresh_token:
        raise AuthenticationError("Refresh token required")

    tokens_service = RefreshTokensService(database_manager)
    token_hash = hash_refresh_token(refresh_token)
    record = await tokens_service.get_by_hash(token_hash)

    if record is None:
        logger.warning("Refresh attempted with an unknown token")
        raise AuthenticationError("Invalid refresh token")
    if record.is_revoked:
        logger.warning(f"Refresh attempted with a revoked token for user {record.user_id}")
        raise AuthenticationError("Refresh token has been revoked")
    if record.is_expired():
        await tokens_service.delete_by_hash(token_hash)
        logger.info(f"Expired refresh token removed for user {record.user_id}")
        raise AuthenticationError("Refresh token expired")

    user = await UsersService(database_manager).get_user_by_id(record.user_id)
    if user is None:
        await tokens_service.delete_by_hash(token_hash)
        raise AuthenticationError("User no longer exists")

    new_refresh_token = generate_refresh_token()
    rotated = await tokens_service.rotate(
        token_hash, user.id, hash_refresh_token(new_refresh_token), _refresh_expiry()
    )
    if not rotated:
        raise AuthenticationError("Refresh token has been revoked")

    access_token = create_access_token(user.id, user.email, user.role)
    logger.info(f"Access token refreshed for user {user.id}")
    return RefreshedSession(
        access_token=access_token,
        refresh_token=new_refresh_token,
        payload=decode_token(access_token),
    )


async def remove_refresh_token(
    refresh_token: Optional[str],
    database_manager: Optional[DatabaseManager] = None,
) -> bool:
    """
    Delete a refresh token. Unknown or missing tokens are a no-op.

    Returns:
        True if a stored token was removed
    """
    if not refresh_token:
        return False
    removed = await RefreshTokensService(database_manager).delete_by_hash(
        hash_refresh_token(refresh_token)
    )
    if removed:
        logger.info("Refresh token removed")
    return removed


# ============================================================================
# CREDENTIALS
# ============================================================================


async def authenticate_user(
    email: str,
    password: str,
    database_manager: Optional[DatabaseManager] = None,
) -> Optional[User]:
    """
    Check an email/password pair.

    Returns:
        The user, or None for an unknown email or a wrong password alike
    """
    if not email or not password:
        return None

    user = await UsersService(database_manager).get_user_by_email(email)
    if user is None or not PasswordHasher.verify_password(password, user.password_hash):
        security_logger.warning(f"Failed login attempt for {email}")
        return None

    logger.info(f"User {user.id} authenticated")
    return user
