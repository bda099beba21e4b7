"""
Audit Recorder
--------------
Append-only audit trail for back-office mutations.

Recording is best-effort: a failed insert is logged and reported on the
side-effect channel, and the mutation that triggered it still succeeds.
There is no update or delete path for audit rows.
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from loguru import logger
from pydantic_core import to_jsonable_python
from sqlalchemy import select

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.core.side_effects import SideEffectChannel, side_effects
from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.models.db_tables import AuditAction, AuditEntityType, AuditLog
from ngo_portal.models.response_models import Pagination


class AuditRecorder(BaseDatabaseService):
    """Writes and lists audit rows."""

    def __init__(
        self,
        database_manager: Optional[DatabaseManager] = None,
        channel: Optional[SideEffectChannel] = None,
    ):
        super().__init__(database_manager)
        self.channel = channel or side_effects

    async def _insert(
        self,
        entity_type: AuditEntityType,
        entity_id: str,
        action: AuditAction,
        performed_by_id: Optional[str],
        changed_data: Optional[Dict[str, Any]],
    ) -> AuditLog:
        entry = AuditLog(
            entity_type=AuditEntityType(entity_type),
            entity_id=str(entity_id),
            action=AuditAction(action),
            performed_by_id=str(performed_by_id) if performed_by_id else None,
            changed_data=to_jsonable_python(changed_data) if changed_data else None,
        )
        async with self.get_session() as session:
            session.add(entry)
        return entry

    async def log_audit(
        self,
        entity_type: Union[AuditEntityType, str],
        entity_id: Union[UUID, str],
        action: Union[AuditAction, str],
        performed_by_id: Optional[Union[UUID, str]],
        changed_data: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        """
        Append one audit row.

        Returns:
            The stored row, or None when recording failed
        """
        entry = await self.channel.run(
            f"audit:{entity_type}:{action}",
            self._insert(
                entity_type, str(entity_id), action, performed_by_id, changed_data
            ),
        )
        if entry is not None:
            logger.debug(
                f"Audit recorded: {entry.action.value} {entry.entity_type.value} "
                f"{entry.entity_id} by {entry.performed_by_id}"
            )
        return entry

    async def list_audit_logs(
        self,
        page: int = 1,
        limit: int = 20,
        entity_type: Optional[str] = None,
        action: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> Tuple[List[AuditLog], Pagination]:
        """Newest first, optionally filtered."""
        query = select(AuditLog).order_by(AuditLog.created_at.desc())
        if entity_type:
            query = query.where(
                AuditLog.entity_type
                == self.validate_enum_value(entity_type, AuditEntityType, "entity_type")
            )
        if action:
            query = query.where(
                AuditLog.action == self.validate_enum_value(action, AuditAction, "action")
            )
        if entity_id:
            query = query.where(AuditLog.entity_id == entity_id)
        return await self.paginate(query, page, limit)
