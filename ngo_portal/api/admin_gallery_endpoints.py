"""
Admin Gallery Endpoints
-----------------------
Gallery CRUD, batch operations and drag-and-drop reordering (ADMIN only).

Batch and reorder results are pushed to connected clients as a
``gallery_update`` message.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from ngo_portal.api.api_helpers import not_found, paginated, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.core.side_effects import side_effects
from ngo_portal.db_services.gallery_service import GalleryService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.request_models import (
    GalleryBatchRequest,
    GalleryImageCreateRequest,
    GalleryImageUpdateRequest,
    GalleryReorderRequest,
)
from ngo_portal.models.response_models import (
    BatchOperationResponse,
    GalleryImageResponse,
)
from ngo_portal.realtime.notification_broadcaster import (
    NotificationBroadcaster,
    get_notification_broadcaster,
)


# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/api/admin/gallery", tags=["Admin - Gallery"])


async def _push_gallery_update(
    broadcaster: Optional[NotificationBroadcaster], operation: str, result: BatchOperationResponse
) -> None:
    if broadcaster is None:
        return
    await side_effects.run(
        f"ws:gallery_update:{operation}",
        broadcaster.broadcast_gallery_update(
            {"operation": operation, "summary": result.summary.model_dump()}
        ),
    )


# ============================================================================
# LIST / READ
# ============================================================================
@router.get("", summary="List gallery images")
async def list_images(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list gallery images"):
        images, pagination = await GalleryService().list_images(
            page, limit, status=status_filter, category=category
        )
        return paginated(images, pagination, GalleryImageResponse)


@router.get("/analytics", summary="Gallery statistics over a trailing period")
async def gallery_analytics(
    period: str = Query("30d", description="7d, 30d, 90d or 1y"),
    category: Optional[str] = None,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("fetch gallery analytics"):
        return await GalleryService().analytics(period, category)


@router.get("/{image_id}", response_model=GalleryImageResponse)
async def get_image(image_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("retrieve gallery image"):
        image = await GalleryService().get_by_id(image_id)
        if image is None:
            raise not_found("Gallery image", image_id)
        return image


# ============================================================================
# CREATE / UPDATE / DELETE
# ============================================================================
@router.post(
    "",
    response_model=GalleryImageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a gallery image",
)
async def create_image(
    request: GalleryImageCreateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("create gallery image"):
        fields = request.model_dump()
        fields["created_by_id"] = current_user.user_id
        return await GalleryService().create(fields, current_user.user_id)


@router.put("/{image_id}", response_model=GalleryImageResponse)
async def update_image(
    image_id: UUID,
    request: GalleryImageUpdateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("update gallery image"):
        image = await GalleryService().update(
            image_id, request.model_dump(exclude_unset=True), current_user.user_id
        )
        if image is None:
            raise not_found("Gallery image", image_id)
        return image


@router.delete("/{image_id}")
async def delete_image(image_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("delete gallery image"):
        service = GalleryService()
        image = await service.get_by_id(image_id)
        if image is None:
            raise not_found("Gallery image", image_id)
        await service.delete(
            image_id,
            current_user.user_id,
            audit_data={"publicId": image.public_id, "title": image.title},
        )
    return {"message": "Gallery image deleted successfully"}


# ============================================================================
# BATCH AND REORDER
# ============================================================================
@router.post(
    "/batch",
    response_model=BatchOperationResponse,
    summary="Apply one operation to many images",
    description=(
        "type is delete, status_change, category_change or tag_operations. "
        "Failures are reported per image and do not undo the others."
    ),
)
async def batch_operation(
    request: GalleryBatchRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
    broadcaster: Optional[NotificationBroadcaster] = Depends(get_notification_broadcaster),
):
    logger.info(
        f"Admin {current_user.user_id} running gallery batch {request.type} "
        f"on {len(request.target_ids)} image(s)"
    )
    with service_errors("run gallery batch operation"):
        result = await GalleryService().batch_operation(
            request.type, request.target_ids, request.value, current_user.user_id
        )

    await _push_gallery_update(broadcaster, request.type, result)
    return result


@router.post(
    "/reorder",
    response_model=BatchOperationResponse,
    summary="Set the display order of images",
)
async def reorder_images(
    request: GalleryReorderRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
    broadcaster: Optional[NotificationBroadcaster] = Depends(get_notification_broadcaster),
):
    with service_errors("reorder gallery images"):
        result = await GalleryService().reorder(
            [(item.id, item.sort_order) for item in request.order],
            current_user.user_id,
        )

    await _push_gallery_update(broadcaster, "reorder", result)
    return result
