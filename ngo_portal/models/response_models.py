"""
Response Models
--------------
Pydantic models for API response validation.
Built from ORM rows with ``model_validate(row)``; never expose password hashes.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from ngo_portal.models.auth_models import CamelModel
from ngo_portal.models.db_tables import (
    AuditAction,
    AuditEntityType,
    CampaignStatus,
    ContactStatus,
    GalleryStatus,
    NotificationType,
    PostStatus,
    UserRole,
)

ItemT = TypeVar("ItemT")


# ============================================================================
# ENTITY RESPONSES
# ============================================================================
class UserResponse(CamelModel):
    """Response schema for user data - no sensitive info"""

    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    verified: bool
    created_at: datetime
    updated_at: datetime


class CampaignResponse(CamelModel):
    id: UUID
    title: str
    description: str
    content: str
    image_url: Optional[str] = None
    goal: float
    raised: float
    category: str
    location: Optional[str] = None
    status: CampaignStatus
    created_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class BlogPostResponse(CamelModel):
    id: UUID
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    status: PostStatus
    author_id: Optional[UUID] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class GalleryImageResponse(CamelModel):
    id: UUID
    title: str
    url: str
    public_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: GalleryStatus
    tags: List[str] = Field(default_factory=list)
    sort_order: int
    created_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class ContactResponse(CamelModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    organization: Optional[str] = None
    subject: str
    message: str
    inquiry_type: str
    status: ContactStatus
    created_at: datetime
    updated_at: datetime


class SettingResponse(CamelModel):
    id: UUID
    key: str
    value: str
    description: Optional[str] = None
    category: str
    created_at: datetime
    updated_at: datetime


class NotificationResponse(CamelModel):
    id: UUID
    title: str
    description: str
    type: NotificationType
    read: bool
    created_at: datetime


class AuditLogResponse(CamelModel):
    id: UUID
    entity_type: AuditEntityType
    entity_id: str
    action: AuditAction
    performed_by_id: Optional[str] = None
    changed_data: Optional[Dict[str, Any]] = None
    created_at: datetime


# ============================================================================
# PAGINATION AND BATCH RESULTS
# ============================================================================
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PaginatedResponse(BaseModel, Generic[ItemT]):
    items: List[ItemT]
    pagination: Pagination


class BatchItemResult(CamelModel):
    id: str
    success: bool
    action: Optional[AuditAction] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class BatchResults(BaseModel):
    successful: List[BatchItemResult] = Field(default_factory=list)
    errors: List[BatchItemResult] = Field(default_factory=list)


class BatchSummary(BaseModel):
    total: int
    success: int
    failed: int


class BatchOperationResponse(BaseModel):
    message: str
    results: BatchResults
    summary: BatchSummary


# ============================================================================
# HEALTH AND ERRORS
# ============================================================================
class Health(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthStatus(BaseModel):
    status: Health
    timestamp: datetime
    version: str


class DependencyHealth(BaseModel):
    """
    Dependency health response model.

    ``redis`` is None when login rate limiting is disabled and Redis is not
    part of the deployment.
    """

    database: bool = Field(..., description="Database health status")
    redis: Optional[bool] = Field(default=None, description="Redis health status")
    status: Health
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
