"""
Gallery Service
---------------
Audited CRUD for gallery images plus batch operations, reordering and
analytics.

Batch operations touch each image in its own transaction. A failure on one
id is reported in that item's result and does not roll back the others.
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import func, select

from ngo_portal.core.exceptions import ValidationFailedError
from ngo_portal.db_services.crud_service import AuditedCrudService
from ngo_portal.models.db_tables import (
    AuditAction,
    AuditEntityType,
    AuditLog,
    GalleryImage,
    GalleryStatus,
    User,
    utc_now,
)
from ngo_portal.models.response_models import (
    BatchItemResult,
    BatchOperationResponse,
    BatchResults,
    BatchSummary,
    Pagination,
)

BATCH_DELETE = "delete"
BATCH_STATUS_CHANGE = "status_change"
BATCH_CATEGORY_CHANGE = "category_change"
BATCH_TAG_OPERATIONS = "tag_operations"
BATCH_OPERATIONS = (
    BATCH_DELETE,
    BATCH_STATUS_CHANGE,
    BATCH_CATEGORY_CHANGE,
    BATCH_TAG_OPERATIONS,
)

ANALYTICS_PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}
DEFAULT_ANALYTICS_PERIOD = "30d"
RECENT_ACTIVITY_WINDOW = timedelta(days=7)


def parse_tags(value: str) -> List[str]:
    """Split a comma separated tag string, dropping blanks."""
    return [tag.strip() for tag in value.split(",") if tag.strip()]


class GalleryService(AuditedCrudService):
    model = GalleryImage
    entity_type = AuditEntityType.GALLERY_IMAGE
    status_enum = GalleryStatus

    def base_query(self):
        return select(GalleryImage).order_by(
            GalleryImage.sort_order.asc(), GalleryImage.created_at.desc()
        )

    async def list_images(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[List[GalleryImage], Pagination]:
        filters = [GalleryImage.category == category] if category else []
        return await self.list_entities(page, limit, status=status, filters=filters)

    async def list_active(
        self, page: int = 1, limit: int = 20, category: Optional[str] = None
    ) -> Tuple[List[GalleryImage], Pagination]:
        return await self.list_images(
            page, limit, status=GalleryStatus.ACTIVE.value, category=category
        )

    # ========================================================================
    # BATCH OPERATIONS
    # ========================================================================

    def _batch_update_fields(self, operation: str, value: Optional[str]) -> Dict[str, Any]:
        """
        Fields written to every image for a non-delete operation.

        Raises:
            ValueError: On an unknown operation or a missing/invalid value
        """
        if operation not in BATCH_OPERATIONS:
            raise ValueError(f"Unsupported batch operation type: {operation}")
        if operation == BATCH_DELETE:
            return {}
        if not value or not value.strip():
            raise ValueError(f"A value is required for {operation}")
        if operation == BATCH_STATUS_CHANGE:
            return {"status": self.validate_enum_value(value, GalleryStatus, "status")}
        if operation == BATCH_CATEGORY_CHANGE:
            return {"category": value.strip()}
        return {"tags": parse_tags(value)}

    async def _apply_to_one(
        self,
        image_id: str,
        operation: str,
        update_fields: Dict[str, Any],
        performed_by_id: Optional[str],
    ) -> BatchItemResult:
        image = await self.get_by_id(image_id)
        if image is None:
            raise LookupError(f"Gallery image {image_id} not found")

        if operation == BATCH_DELETE:
            audit_data = {"publicId": image.public_id, "title": image.title}
            if not await self.delete(image.id, performed_by_id, audit_data=audit_data):
                raise LookupError(f"Gallery image {image_id} not found")
            return BatchItemResult(
                id=image_id, success=True, action=AuditAction.DELETE, data=audit_data
            )

        updated = await self.update(image.id, update_fields, performed_by_id)
        if updated is None:
            raise LookupError(f"Gallery image {image_id} not found")
        return BatchItemResult(
            id=image_id,
            success=True,
            action=AuditAction.UPDATE,
            data={k: getattr(v, "value", v) for k, v in update_fields.items()},
        )

    async def batch_operation(
        self,
        operation: str,
        target_ids: Sequence[str],
        value: Optional[str] = None,
        performed_by_id: Optional[str] = None,
    ) -> BatchOperationResponse:
        """
        Apply one operation to many images.

        Raises:
            ValueError: When the operation itself is invalid (nothing is applied)
        """
        if not target_ids:
            raise ValueError("targetIds must contain at least one id")
        update_fields = self._batch_update_fields(operation, value)

        results = BatchResults()
        for image_id in target_ids:
            try:
                item = await self._apply_to_one(
                    str(image_id), operation, update_fields, performed_by_id
                )
                results.successful.append(item)
            except Exception as e:
                logger.warning(f"Batch {operation} failed for image {image_id}: {e}")
                results.errors.append(
                    BatchItemResult(id=str(image_id), success=False, error=str(e))
                )

        success, failed = len(results.successful), len(results.errors)
        logger.info(f"Gallery batch {operation}: {success} succeeded, {failed} failed")
        return BatchOperationResponse(
            message=f"Batch operation completed. {success} successful, {failed} failed.",
            results=results,
            summary=BatchSummary(total=len(target_ids), success=success, failed=failed),
        )

    # ========================================================================
    # REORDER
    # ========================================================================

    async def reorder(
        self,
        order: Sequence[Tuple[Any, int]],
        performed_by_id: Optional[str] = None,
    ) -> BatchOperationResponse:
        """
        Set ``sort_order`` for each (id, sort_order) pair.

        Raises:
            ValidationFailedError: If any id does not exist (nothing is changed)
        """
        if not order:
            raise ValueError("order must contain at least one item")
        ids = [self.validate_uuid(image_id, "id") for image_id, _ in order]

        async with self.get_session() as session:
            result = await session.execute(
                select(GalleryImage.id, GalleryImage.sort_order).where(
                    GalleryImage.id.in_(ids)
                )
            )
            previous = {row.id: row.sort_order for row in result.all()}

        missing = [str(image_id) for image_id in ids if image_id not in previous]
        if missing:
            raise ValidationFailedError("Some images not found", details={"missingIds": missing})

        results = BatchResults()
        for image_id, (_, sort_order) in zip(ids, order):
            try:
                if sort_order < 0:
                    raise ValueError(f"Invalid sort order: {sort_order}")
                async with self.get_session() as session:
                    image = await session.get(GalleryImage, image_id)
                    image.sort_order = sort_order
                results.successful.append(
                    BatchItemResult(
                        id=str(image_id),
                        success=True,
                        action=AuditAction.UPDATE,
                        data={"sortOrder": sort_order},
                    )
                )
            except Exception as e:
                logger.warning(f"Reorder failed for image {image_id}: {e}")
                results.errors.append(
                    BatchItemResult(id=str(image_id), success=False, error=str(e))
                )

        await self.audit.log_audit(
            self.entity_type,
            "batch_reorder",
            AuditAction.UPDATE,
            performed_by_id,
            {
                "operation": "batch_reorder",
                "changes": [
                    {
                        "id": str(image_id),
                        "oldSortOrder": previous.get(image_id),
                        "newSortOrder": sort_order,
                    }
                    for image_id, (_, sort_order) in zip(ids, order)
                ],
            },
        )

        success, failed = len(results.successful), len(results.errors)
        return BatchOperationResponse(
            message=f"Reorder operation completed. {success} successful, {failed} failed.",
            results=results,
            summary=BatchSummary(total=len(order), success=success, failed=failed),
        )

    # ========================================================================
    # ANALYTICS
    # ========================================================================

    async def analytics(
        self, period: str = DEFAULT_ANALYTICS_PERIOD, category: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Gallery statistics over a trailing window (7d, 30d, 90d or 1y).

        Unknown periods fall back to 30d. Status and category counts cover
        the whole gallery; timeline, top images, growth and most active users
        cover the window. Recent activity is always the last 7 days.
        """
        if period not in ANALYTICS_PERIODS:
            period = DEFAULT_ANALYTICS_PERIOD
        window = ANALYTICS_PERIODS[period]
        now = utc_now()
        start = now - window
        previous_start = start - window

        category_filter = [GalleryImage.category == category] if category else []
        in_window = [GalleryImage.created_at >= start, *category_filter]

        by_status = await self.count_by_status()
        total = sum(by_status.values())

        async with self.get_session() as session:
            category_rows = await session.execute(
                select(GalleryImage.category, func.count(GalleryImage.id))
                .where(*category_filter)
                .group_by(GalleryImage.category)
                .order_by(func.count(GalleryImage.id).desc())
            )

            current_uploads = (
                await session.execute(select(func.count(GalleryImage.id)).where(*in_window))
            ).scalar_one()
            previous_uploads = (
                await session.execute(
                    select(func.count(GalleryImage.id)).where(
                        GalleryImage.created_at >= previous_start,
                        GalleryImage.created_at < start,
                        *category_filter,
                    )
                )
            ).scalar_one()

            upload_day = func.date(GalleryImage.created_at)
            timeline_rows = await session.execute(
                select(upload_day, func.count(GalleryImage.id))
                .where(*in_window)
                .group_by(upload_day)
                .order_by(upload_day.asc())
            )

            top_images = (
                await session.execute(
                    select(GalleryImage)
                    .where(*in_window)
                    .order_by(GalleryImage.created_at.desc())
                    .limit(10)
                )
            ).scalars().all()

            recent_activity = (
                await session.execute(
                    select(AuditLog)
                    .where(
                        AuditLog.entity_type == AuditEntityType.GALLERY_IMAGE,
                        AuditLog.created_at >= now - RECENT_ACTIVITY_WINDOW,
                    )
                    .order_by(AuditLog.created_at.desc())
                    .limit(20)
                )
            ).scalars().all()

            active_rows = (
                await session.execute(
                    select(AuditLog.performed_by_id, func.count(AuditLog.id))
                    .where(
                        AuditLog.entity_type == AuditEntityType.GALLERY_IMAGE,
                        AuditLog.created_at >= start,
                        AuditLog.performed_by_id.is_not(None),
                    )
                    .group_by(AuditLog.performed_by_id)
                    .order_by(func.count(AuditLog.id).desc())
                    .limit(5)
                )
            ).all()
            users = await self._users_by_id(session, [row[0] for row in active_rows])

        growth_rate = (
            (current_uploads - previous_uploads) / previous_uploads * 100
            if previous_uploads
            else 0.0
        )
        return {
            "overview": {
                "totalImages": total,
                "activeImages": by_status[GalleryStatus.ACTIVE.value],
                "hiddenImages": by_status[GalleryStatus.HIDDEN.value],
                "archivedImages": by_status[GalleryStatus.ARCHIVED.value],
                "uploadsInPeriod": current_uploads,
                "growthRate": round(growth_rate, 2),
                "avgUploadsPerDay": round(current_uploads / window.days, 2),
                "period": period,
            },
            "categories": [
                {
                    "name": name or "Uncategorized",
                    "count": count,
                    "percentage": round(count / total * 100, 2) if total else 0.0,
                }
                for name, count in category_rows.all()
            ],
            "timeline": [{"date": str(day), "count": count} for day, count in timeline_rows.all()],
            "topImages": [
                {
                    "id": str(image.id),
                    "title": image.title,
                    "url": image.url,
                    "category": image.category,
                    "createdAt": image.created_at.isoformat(),
                }
                for image in top_images
            ],
            "recentActivity": [
                {
                    "id": str(entry.id),
                    "action": entry.action.value,
                    "entityId": entry.entity_id,
                    "performedById": entry.performed_by_id,
                    "changedData": entry.changed_data,
                    "createdAt": entry.created_at.isoformat(),
                }
                for entry in recent_activity
            ],
            "mostActiveUsers": [
                {"userId": user_id, "activityCount": count, "user": users.get(user_id)}
                for user_id, count in active_rows
            ],
        }

    @staticmethod
    async def _users_by_id(session, user_ids: Sequence[str]) -> Dict[str, Dict[str, str]]:
        """Name and email for each id that still belongs to a user."""
        uuids = []
        for user_id in user_ids:
            try:
                uuids.append(UUID(user_id))
            except ValueError:
                continue
        if not uuids:
            return {}
        result = await session.execute(select(User).where(User.id.in_(uuids)))
        return {
            str(user.id): {
                "firstName": user.first_name,
                "lastName": user.last_name,
                "email": user.email,
            }
            for user in result.scalars().all()
        }
