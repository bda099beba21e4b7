"""
Settings Service
----------------
Key/value site settings stored in their own table. Every write is audited.
"""

from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select

from ngo_portal.db_services.crud_service import AuditedCrudService
from ngo_portal.models.db_tables import AuditAction, AuditEntityType, Setting

DEFAULT_CATEGORY = "general"


class SettingsService(AuditedCrudService):
    model = Setting
    entity_type = AuditEntityType.SETTING

    async def list_settings(self, category: Optional[str] = None) -> List[Setting]:
        query = select(Setting).order_by(Setting.category.asc(), Setting.key.asc())
        if category:
            query = query.where(Setting.category == category)
        async with self.get_session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get_by_key(self, key: str) -> Optional[Setting]:
        async with self.get_session() as session:
            result = await session.execute(select(Setting).where(Setting.key == key))
            return result.scalar_one_or_none()

    async def upsert(
        self,
        key: str,
        value: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        performed_by_id: Optional[Union[UUID, str]] = None,
    ) -> Setting:
        """
        Create the setting or overwrite its value.

        Raises:
            ValueError: If key or value is empty
        """
        key = self.validate_string_not_empty(key, "key")
        if value is None or value == "":
            raise ValueError("value must be a non-empty string")

        async with self.get_session() as session:
            result = await session.execute(select(Setting).where(Setting.key == key))
            setting = result.scalar_one_or_none()
            created = setting is None
            if created:
                setting = Setting(
                    key=key,
                    value=value,
                    description=description,
                    category=category or DEFAULT_CATEGORY,
                )
                session.add(setting)
            else:
                setting.value = value
                setting.description = description
                setting.category = category or DEFAULT_CATEGORY

        self.log_operation("CREATE" if created else "UPDATE", key)
        await self.audit.log_audit(
            self.entity_type,
            setting.id,
            AuditAction.CREATE if created else AuditAction.UPDATE,
            performed_by_id,
            {"key": key, "value": value, "description": description, "category": category},
        )
        return setting

    async def update_by_key(
        self,
        key: str,
        value: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        performed_by_id: Optional[Union[UUID, str]] = None,
    ) -> Optional[Setting]:
        """
        Returns:
            Updated setting or None if the key does not exist
        """
        setting = await self.get_by_key(key)
        if setting is None:
            return None
        fields = {"value": value}
        if description is not None:
            fields["description"] = description
        if category is not None:
            fields["category"] = category
        return await self.update(setting.id, fields, performed_by_id)

    async def delete_by_key(
        self, key: str, performed_by_id: Optional[Union[UUID, str]] = None
    ) -> bool:
        setting = await self.get_by_key(key)
        if setting is None:
            return False
        return await self.delete(
            setting.id, performed_by_id, audit_data={"key": key, "value": setting.value}
        )
