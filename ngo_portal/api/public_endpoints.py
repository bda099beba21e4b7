"""
Public Endpoints
----------------
Unauthenticated read access to published content and the contact form.

Only ACTIVE campaigns, PUBLISHED posts and ACTIVE gallery images are visible
here; everything else is back-office only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from ngo_portal.api.api_helpers import not_found, paginated, service_errors
from ngo_portal.core.side_effects import side_effects
from ngo_portal.db_services.blog_posts_service import BlogPostsService
from ngo_portal.db_services.campaigns_service import CampaignsService
from ngo_portal.db_services.contacts_service import ContactsService
from ngo_portal.db_services.gallery_service import GalleryService
from ngo_portal.db_services.notifications_service import NotificationsService
from ngo_portal.models.db_tables import NotificationType
from ngo_portal.models.request_models import ContactCreateRequest
from ngo_portal.models.response_models import (
    BlogPostResponse,
    CampaignResponse,
    GalleryImageResponse,
)
from ngo_portal.realtime.notification_broadcaster import (
    NotificationBroadcaster,
    get_notification_broadcaster,
)

router = APIRouter(prefix="/api", tags=["Public"])


@router.get("/campaigns", summary="Active campaigns")
async def list_campaigns(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
):
    with service_errors("list campaigns"):
        campaigns, pagination = await CampaignsService().list_active(page, limit, category)
        return paginated(campaigns, pagination, CampaignResponse)


@router.get("/campaigns/search", summary="Search public campaigns")
async def search_campaigns(
    q: str = "",
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
):
    """
    Raises:
        HTTPException 400: Hidden status or unknown sort field/order
    """
    with service_errors("search campaigns"):
        campaigns, pagination = await CampaignsService().search(
            q,
            status=status_filter,
            category=category,
            location=location,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        response = paginated(campaigns, pagination, CampaignResponse)
    response["filters"] = {
        "q": q,
        "status": status_filter,
        "category": category,
        "location": location,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }
    return response


@router.get("/categories/blog", summary="Categories of published blog posts")
async def blog_categories():
    with service_errors("fetch blog categories"):
        categories, total = await BlogPostsService().published_categories()
    return {"categories": [{"name": "All", "count": total}, *categories], "total": total}


@router.get("/blog", summary="Published blog posts")
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
):
    with service_errors("list blog posts"):
        posts, pagination = await BlogPostsService().list_published(page, limit, category)
        return paginated(posts, pagination, BlogPostResponse)


@router.get("/blog/{id_or_slug}", response_model=BlogPostResponse, summary="One published post")
async def get_post(id_or_slug: str):
    with service_errors("retrieve blog post"):
        post = await BlogPostsService().get_published(id_or_slug)
        if post is None:
            raise not_found("Blog post", id_or_slug)
        return post


@router.get("/gallery", summary="Active gallery images in display order")
async def list_gallery(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
):
    with service_errors("list gallery images"):
        images, pagination = await GalleryService().list_active(page, limit, category)
        return paginated(images, pagination, GalleryImageResponse)


@router.post(
    "/contacts",
    status_code=status.HTTP_201_CREATED,
    summary="Submit the contact form",
)
async def submit_contact(
    request: ContactCreateRequest,
    broadcaster: Optional[NotificationBroadcaster] = Depends(get_notification_broadcaster),
):
    """
    Store the message and notify the admins.

    Raises:
        HTTPException 400: Missing name, email, subject or message
    """
    with service_errors("submit contact form"):
        contact = await ContactsService().submit(request.model_dump())

    logger.info(f"Contact message received: id={contact.id}, type={contact.inquiry_type}")
    await side_effects.run(
        "notify:contact",
        NotificationsService(broadcaster=broadcaster).create_and_broadcast_notification(
            "New contact message",
            f"{contact.name} sent: {contact.subject}",
            NotificationType.INFO,
        ),
    )
    return {"message": "Message sent successfully", "id": str(contact.id)}
