"""
Admin Notification Endpoints
----------------------------
The admin notification feed. Creating a notification stores it and then
pushes it to every connected WebSocket client.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ngo_portal.api.api_helpers import not_found, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.notifications_service import NotificationsService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.request_models import NotificationCreateRequest
from ngo_portal.models.response_models import NotificationResponse
from ngo_portal.realtime.notification_broadcaster import (
    NotificationBroadcaster,
    get_notification_broadcaster,
)

router = APIRouter(prefix="/api/admin/notifications", tags=["Admin - Notifications"])


@router.get("", response_model=List[NotificationResponse], summary="Latest 50 notifications")
async def list_notifications(current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("list notifications"):
        return await NotificationsService().list_latest()


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create and broadcast a notification",
)
async def create_notification(
    request: NotificationCreateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
    broadcaster: Optional[NotificationBroadcaster] = Depends(get_notification_broadcaster),
):
    with service_errors("create notification"):
        return await NotificationsService(
            broadcaster=broadcaster
        ).create_and_broadcast_notification(
            request.title, request.description, request.type
        )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("mark notification read"):
        notification = await NotificationsService().mark_read(notification_id)
        if notification is None:
            raise not_found("Notification", notification_id)
        return notification


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("delete notification"):
        if not await NotificationsService().delete_notification(notification_id):
            raise not_found("Notification", notification_id)
    return {"message": "Notification deleted successfully"}
