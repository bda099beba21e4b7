"""
Audited CRUD Service
--------------------
Shared create/read/update/delete for back-office entities. Every mutation
appends an audit row naming the acting user.

Subclasses set ``model``, ``entity_type`` and ``status_enum`` and add their
entity-specific operations.
"""

from typing import Any, Dict, List, Optional, Tuple, Type, Union
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.sql.elements import ColumnElement

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.db_services.audit_service import AuditRecorder
from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.models.db_tables import AuditAction, AuditEntityType, Base
from ngo_portal.models.response_models import Pagination


class AuditedCrudService(BaseDatabaseService):
    model: Type[Base]
    entity_type: AuditEntityType
    status_enum: Optional[type] = None

    def __init__(
        self,
        database_manager: Optional[DatabaseManager] = None,
        audit_recorder: Optional[AuditRecorder] = None,
    ):
        super().__init__(database_manager)
        self.audit = audit_recorder or AuditRecorder(self.database_manager)

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def get_by_id(self, entity_id: Union[UUID, str]) -> Optional[Any]:
        entity_id = self.validate_uuid(entity_id, "id")
        async with self.get_session() as session:
            return await session.get(self.model, entity_id)

    def base_query(self) -> Select:
        return select(self.model).order_by(self.model.created_at.desc())

    async def list_entities(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        filters: Optional[List[ColumnElement]] = None,
        query: Optional[Select] = None,
    ) -> Tuple[List[Any], Pagination]:
        query = query if query is not None else self.base_query()
        if status and self.status_enum is not None:
            query = query.where(
                self.model.status
                == self.validate_enum_value(status, self.status_enum, "status")
            )
        for condition in filters or []:
            query = query.where(condition)
        return await self.paginate(query, page, limit)

    async def count_by_status(self) -> Dict[str, int]:
        """Row count per status value, zero for statuses with no rows."""
        counts = {status.value: 0 for status in self.status_enum}
        async with self.get_session() as session:
            result = await session.execute(
                select(self.model.status, func.count(self.model.id)).group_by(
                    self.model.status
                )
            )
            for status, count in result.all():
                counts[self.status_enum(status).value] = count
        return counts

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    def prepare_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for subclasses to validate or derive fields before a write."""
        self.reject_null_fields(fields)
        if "status" in fields and fields["status"] is not None and self.status_enum:
            fields["status"] = self.validate_enum_value(
                fields["status"], self.status_enum, "status"
            )
        return fields

    def reject_null_fields(self, fields: Dict[str, Any]) -> None:
        """
        Raises:
            ValueError: If an explicit None targets a NOT NULL column
        """
        columns = self.model.__table__.columns
        for field_name, field_value in fields.items():
            if field_value is None and field_name in columns and not columns[field_name].nullable:
                raise ValueError(f"{field_name} cannot be null")

    async def create(
        self, fields: Dict[str, Any], performed_by_id: Optional[Union[UUID, str]] = None
    ) -> Any:
        fields = self.prepare_fields(dict(fields))
        entity = self.model(**fields)
        async with self.get_session() as session:
            session.add(entity)

        self.log_operation("CREATE", entity.id)
        await self.audit.log_audit(
            self.entity_type, entity.id, AuditAction.CREATE, performed_by_id, fields
        )
        return entity

    async def update(
        self,
        entity_id: Union[UUID, str],
        fields: Dict[str, Any],
        performed_by_id: Optional[Union[UUID, str]] = None,
    ) -> Optional[Any]:
        """
        Returns:
            Updated entity or None if not found
        """
        entity_id = self.validate_uuid(entity_id, "id")
        async with self.get_session() as session:
            entity = await session.get(self.model, entity_id)
            if entity is None:
                return None
            fields = self.prepare_update(entity, dict(fields))
            changed = self.apply_updates(entity, fields)

        if changed:
            self.log_operation("UPDATE", entity_id, additional_context=f"fields={sorted(changed)}")
            await self.audit.log_audit(
                self.entity_type, entity_id, AuditAction.UPDATE, performed_by_id, changed
            )
        return entity

    def prepare_update(self, entity: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Hook with access to the stored entity; defaults to ``prepare_fields``."""
        return self.prepare_fields(fields)

    async def delete(
        self,
        entity_id: Union[UUID, str],
        performed_by_id: Optional[Union[UUID, str]] = None,
        audit_data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Returns:
            True if a row was deleted
        """
        entity_id = self.validate_uuid(entity_id, "id")
        async with self.get_session() as session:
            result = await session.execute(
                delete(self.model).where(self.model.id == entity_id)
            )
            deleted = result.rowcount > 0

        if deleted:
            self.log_operation("DELETE", entity_id)
            await self.audit.log_audit(
                self.entity_type, entity_id, AuditAction.DELETE, performed_by_id, audit_data
            )
        return deleted
