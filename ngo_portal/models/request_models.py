"""
Back-Office Request Models
==========================

Pydantic request models for the admin and public APIs.

Create models carry the required fields; update models make every field
optional and are applied with ``model_dump(exclude_unset=True)`` so that only
what the client sent is written.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from ngo_portal.models.auth_models import CamelModel
from ngo_portal.models.db_tables import (
    CampaignStatus,
    ContactStatus,
    GalleryStatus,
    NotificationType,
    PostStatus,
    UserRole,
)


# ============================================================================
# USERS
# ============================================================================


class UserCreateRequest(CamelModel):
    """Admin-created user; admin-created accounts are verified immediately."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    password: str = Field(..., min_length=8)
    role: UserRole = Field(default=UserRole.VOLUNTEER)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class UserUpdateRequest(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    role: Optional[UserRole] = None
    verified: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=8)


# ============================================================================
# CAMPAIGNS
# ============================================================================


class CampaignCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    content: str = Field(default="")
    image_url: Optional[str] = None
    goal: float = Field(default=0.0, ge=0)
    raised: float = Field(default=0.0, ge=0)
    category: str = Field(default="general", max_length=100)
    location: Optional[str] = None
    status: CampaignStatus = CampaignStatus.DRAFT


class CampaignUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    goal: Optional[float] = Field(default=None, ge=0)
    raised: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    location: Optional[str] = None
    status: Optional[CampaignStatus] = None


# ============================================================================
# BLOG POSTS
# ============================================================================


class BlogPostCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(
        default=None, description="Derived from the title when omitted"
    )
    excerpt: Optional[str] = None
    content: str = Field(..., min_length=1)
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    status: PostStatus = PostStatus.DRAFT


class BlogPostUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None
    status: Optional[PostStatus] = None


# ============================================================================
# GALLERY
# ============================================================================


class GalleryImageCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1)
    public_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: GalleryStatus = GalleryStatus.ACTIVE
    tags: List[str] = Field(default_factory=list)
    sort_order: int = Field(default=0, ge=0)


class GalleryImageUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    url: Optional[str] = None
    public_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[GalleryStatus] = None
    tags: Optional[List[str]] = None
    sort_order: Optional[int] = Field(default=None, ge=0)


class GalleryBatchRequest(CamelModel):
    """
    Batch operation over gallery images.

    ``type`` is one of delete, status_change, category_change or
    tag_operations; ``value`` carries the new status, the new category or a
    comma separated tag list.
    """

    type: str
    target_ids: List[str] = Field(..., min_length=1)
    value: Optional[str] = None


class GalleryReorderItem(CamelModel):
    id: UUID
    sort_order: int


class GalleryReorderRequest(CamelModel):
    order: List[GalleryReorderItem] = Field(..., min_length=1)


# ============================================================================
# CONTACTS
# ============================================================================


class ContactCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    organization: Optional[str] = None
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    inquiry_type: str = Field(default="general", max_length=50)


class ContactUpdateRequest(CamelModel):
    status: ContactStatus


# ============================================================================
# SETTINGS
# ============================================================================


class SettingUpsertRequest(CamelModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None


class SettingUpdateRequest(CamelModel):
    value: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None


# ============================================================================
# NOTIFICATIONS
# ============================================================================


class NotificationCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
