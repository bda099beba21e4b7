"""
Dashboard Endpoints
-------------------
Role dashboards. ``router`` serves the JSON data behind each dashboard;
``pages_router`` serves the page shells the session gate protects, plus the
login page hint the gate redirects to.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from ngo_portal.api.api_helpers import service_errors
from ngo_portal.auth.auth_dependencies import (
    get_optional_user,
    require_admin,
    require_sponsor,
    require_volunteer,
)
from ngo_portal.auth.session_cookies import LOGIN_PATH, home_for_role
from ngo_portal.auth.session_gate import current_identity
from ngo_portal.db_services.blog_posts_service import BlogPostsService
from ngo_portal.db_services.campaigns_service import CampaignsService
from ngo_portal.db_services.contacts_service import ContactsService
from ngo_portal.db_services.gallery_service import GalleryService
from ngo_portal.db_services.notifications_service import NotificationsService
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.db_tables import CampaignStatus, PostStatus
from ngo_portal.realtime.notification_broadcaster import (
    NotificationBroadcaster,
    get_notification_broadcaster,
)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboards"])
pages_router = APIRouter(tags=["Pages"], include_in_schema=False)


# ============================================================================
# DASHBOARD DATA
# ============================================================================
@router.get("/admin", summary="Admin dashboard statistics")
async def admin_stats(
    current_user: AuthTokenPayload = Depends(require_admin),
    broadcaster: Optional[NotificationBroadcaster] = Depends(get_notification_broadcaster),
):
    with service_errors("load admin dashboard"):
        users = await UsersService().count_users_by_role()
        campaigns = await CampaignsService().count_by_status()
        posts = await BlogPostsService().count_by_status()
        contacts = await ContactsService().count_by_status()
        unread = await NotificationsService().count_unread()

    return {
        "users": {"total": sum(users.values()), "byRole": users},
        "campaigns": {"total": sum(campaigns.values()), "byStatus": campaigns},
        "posts": {"total": sum(posts.values()), "byStatus": posts},
        "contacts": {"total": sum(contacts.values()), "byStatus": contacts},
        "unreadNotifications": unread,
        "connectedClients": broadcaster.connected_clients_count if broadcaster else 0,
    }


@router.get("/volunteer", summary="Volunteer dashboard summary")
async def volunteer_summary(current_user: AuthTokenPayload = Depends(require_volunteer)):
    with service_errors("load volunteer dashboard"):
        campaigns = await CampaignsService().count_by_status()
        posts = await BlogPostsService().count_by_status()
        _, gallery = await GalleryService().list_active(page=1, limit=1)

    return {
        "user": {"id": str(current_user.user_id), "email": current_user.email},
        "activeCampaigns": campaigns[CampaignStatus.ACTIVE.value],
        "publishedPosts": posts[PostStatus.PUBLISHED.value],
        "galleryImages": gallery.total,
    }


@router.get("/sponsor", summary="Sponsor dashboard summary")
async def sponsor_summary(current_user: AuthTokenPayload = Depends(require_sponsor)):
    with service_errors("load sponsor dashboard"):
        service = CampaignsService()
        campaigns = await service.count_by_status()
        totals = await service.totals()

    return {
        "user": {"id": str(current_user.user_id), "email": current_user.email},
        "activeCampaigns": campaigns[CampaignStatus.ACTIVE.value],
        "completedCampaigns": campaigns[CampaignStatus.COMPLETED.value],
        "fundingGoal": totals["goal"],
        "fundsRaised": totals["raised"],
    }


# ============================================================================
# PAGE SHELLS
# ============================================================================
def _page_shell(request: Request, page: str) -> dict:
    identity = current_identity(request)
    return {
        "page": page,
        "user": {
            "id": str(identity.user_id),
            "email": identity.email,
            "role": identity.role.value,
        }
        if identity
        else None,
    }


@pages_router.get("/dashboard/admin")
async def admin_page(request: Request):
    return _page_shell(request, "admin")


@pages_router.get("/dashboard/volunteer")
async def volunteer_page(request: Request):
    return _page_shell(request, "volunteer")


@pages_router.get("/dashboard/sponsor")
async def sponsor_page(request: Request):
    return _page_shell(request, "sponsor")


@pages_router.get(LOGIN_PATH)
async def login_page(current_user: Optional[AuthTokenPayload] = Depends(get_optional_user)):
    """Login page shell; already-authenticated users are pointed at their dashboard."""
    return {
        "page": "login",
        "loginEndpoint": "/api/auth/login",
        "redirectUrl": home_for_role(current_user.role) if current_user else None,
    }
