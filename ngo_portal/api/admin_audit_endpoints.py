"""
Admin Audit Log Endpoints
-------------------------
Read-only view over the audit trail (ADMIN only).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ngo_portal.api.api_helpers import paginated, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.audit_service import AuditRecorder
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.response_models import AuditLogResponse

router = APIRouter(prefix="/api/admin/audit-logs", tags=["Admin - Audit"])


@router.get("", summary="List audit log entries, newest first")
async def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    action: Optional[str] = None,
    entity_id: Optional[str] = Query(None, alias="entityId"),
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list audit logs"):
        entries, pagination = await AuditRecorder().list_audit_logs(
            page, limit, entity_type=entity_type, action=action, entity_id=entity_id
        )
        return paginated(entries, pagination, AuditLogResponse)
