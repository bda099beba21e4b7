"""
Admin Export Endpoints
----------------------
Download users, campaigns, blog posts or contacts as CSV or JSON (ADMIN only).
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from loguru import logger

from ngo_portal.api.api_helpers import service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.export_service import ExportService
from ngo_portal.models.auth_models import AuthTokenPayload

router = APIRouter(prefix="/api/admin/export", tags=["Admin - Export"])

MEDIA_TYPES = {"csv": "text/csv", "json": "application/json"}


@router.get("/{export_type}", summary="Export one table as a file download")
async def export_data(
    export_type: str,
    export_format: str = Query("csv", alias="format"),
    current_user: AuthTokenPayload = Depends(require_admin),
):
    """
    Raises:
        HTTPException 400: Unknown export type or format
    """
    with service_errors(f"export {export_type}"):
        service = ExportService()
        service.validate_export(export_type, export_format)
        rows = await service.fetch_rows(export_type)

    content = (
        service.to_csv(export_type, rows)
        if export_format == "csv"
        else service.to_json(rows)
    )
    filename = service.filename(export_type, export_format)
    logger.info(f"Export {filename} ({len(rows)} rows) by user {current_user.user_id}")
    return Response(
        content=content,
        media_type=MEDIA_TYPES[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
