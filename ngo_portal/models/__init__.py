"""
Models Package
--------------
SQLAlchemy tables and the Pydantic models exchanged with API clients.
"""

from ngo_portal.models.db_tables import (
    Base,
    User,
    RefreshToken,
    Notification,
    AuditLog,
    Campaign,
    BlogPost,
    GalleryImage,
    Contact,
    Setting,
    UserRole,
    NotificationType,
    AuditEntityType,
    AuditAction,
    CampaignStatus,
    PostStatus,
    GalleryStatus,
    ContactStatus,
    utc_now,
)
from ngo_portal.models.auth_models import (
    AuthTokenPayload,
    IssuedSession,
    RefreshedSession,
)

__all__ = [
    # Tables
    "Base",
    "User",
    "RefreshToken",
    "Notification",
    "AuditLog",
    "Campaign",
    "BlogPost",
    "GalleryImage",
    "Contact",
    "Setting",
    # Enums
    "UserRole",
    "NotificationType",
    "AuditEntityType",
    "AuditAction",
    "CampaignStatus",
    "PostStatus",
    "GalleryStatus",
    "ContactStatus",
    "utc_now",
    # Tokens
    "AuthTokenPayload",
    "IssuedSession",
    "RefreshedSession",
]
