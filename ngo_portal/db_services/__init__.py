"""
Database Services Package
-------------------------
Async ORM services for the portal.

This package provides:
- Base service class with session handling, pagination and validation
- Credential store services (users, refresh tokens)
- The audit recorder and the notifications service
- Audited CRUD services for campaigns, blog posts, gallery, contacts and settings
- CSV and JSON export of users, campaigns, blog posts and contacts
"""

from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.db_services.refresh_tokens_service import RefreshTokensService
from ngo_portal.db_services.audit_service import AuditRecorder
from ngo_portal.db_services.notifications_service import NotificationsService
from ngo_portal.db_services.crud_service import AuditedCrudService
from ngo_portal.db_services.campaigns_service import CampaignsService
from ngo_portal.db_services.blog_posts_service import BlogPostsService
from ngo_portal.db_services.gallery_service import GalleryService
from ngo_portal.db_services.contacts_service import ContactsService
from ngo_portal.db_services.settings_service import SettingsService
from ngo_portal.db_services.export_service import ExportService

__all__ = [
    "BaseDatabaseService",
    "UsersService",
    "RefreshTokensService",
    "AuditRecorder",
    "NotificationsService",
    "AuditedCrudService",
    "CampaignsService",
    "BlogPostsService",
    "GalleryService",
    "ContactsService",
    "SettingsService",
    "ExportService",
]
