"""
Authentication Models
---------------------
Pydantic models for token payloads and the auth API.
Request and response bodies use camelCase on the wire.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from ngo_portal.models.db_tables import UserRole


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class AuthTokenPayload(BaseModel):
    """
    Access token payload.

    Only identity claims travel in the token; everything else is read from
    the database when needed.
    """

    user_id: UUID = Field(..., description="User's unique identifier")
    email: str = Field(..., description="User's email at issue time")
    role: UserRole = Field(..., description="ADMIN, SPONSOR or VOLUNTEER")
    exp: datetime = Field(..., description="Token expiration timestamp (UTC)")
    iat: datetime = Field(..., description="Token issued at timestamp (UTC)")
    type: str = Field(default="access", description="Token type")

    def same_identity(self, other: "AuthTokenPayload") -> bool:
        return (
            self.user_id == other.user_id
            and self.email == other.email
            and self.role == other.role
        )


class IssuedSession(BaseModel):
    """Access and refresh token pair minted at login or rotation."""

    access_token: str
    refresh_token: str
    payload: AuthTokenPayload


class RefreshedSession(IssuedSession):
    """Result of a successful refresh-token rotation."""


# ============================================================================
# AUTH API REQUESTS
# ============================================================================


class AuthLoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "volunteer@example.org", "password": "SecurePass123"}
        },
    )


class AuthRegisterRequest(CamelModel):
    """Self-service registration; admins are never created here."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    password: str = Field(..., min_length=8)
    user_type: str = Field(..., description="volunteer or sponsor")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()

    @field_validator("user_type")
    @classmethod
    def normalize_user_type(cls, v: str) -> str:
        return v.lower().strip()


class AuthRefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


# ============================================================================
# AUTH API RESPONSES
# ============================================================================


class AuthUserSummary(CamelModel):
    id: UUID
    name: str
    email: str
    role: UserRole


class AuthLoginResponse(CamelModel):
    message: str = "Login successful"
    user: AuthUserSummary
    token: str
    redirect_url: str


class AuthMessageResponse(CamelModel):
    message: str


class AuthIdentityResponse(CamelModel):
    user_id: UUID
    email: str
    role: UserRole
    expires_at: datetime
