"""
Notifications Service
---------------------
Persistence for admin notifications and the persist-then-broadcast path.
"""

from typing import List, Optional, Union
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, func, select

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.models.db_tables import Notification, NotificationType
from ngo_portal.realtime.notification_broadcaster import NotificationBroadcaster


class NotificationsService(BaseDatabaseService):
    """
    Notification CRUD.

    A notification is broadcast at most once and only after its row is
    committed; if the insert fails nothing is sent.
    """

    LATEST_LIMIT = 50

    def __init__(
        self,
        database_manager: Optional[DatabaseManager] = None,
        broadcaster: Optional[NotificationBroadcaster] = None,
    ):
        super().__init__(database_manager)
        self.broadcaster = broadcaster

    async def create_notification(
        self,
        title: str,
        description: str,
        notification_type: Union[NotificationType, str] = NotificationType.INFO,
    ) -> Notification:
        """
        Raises:
            ValueError: On empty title/description or unknown type
        """
        notification = Notification(
            title=self.validate_string_not_empty(title, "title"),
            description=self.validate_string_not_empty(description, "description"),
            type=self.validate_enum_value(notification_type, NotificationType, "type"),
        )
        async with self.get_session() as session:
            session.add(notification)
        self.log_operation("CREATE", notification.id)
        return notification

    async def create_and_broadcast_notification(
        self,
        title: str,
        description: str,
        notification_type: Union[NotificationType, str] = NotificationType.INFO,
    ) -> Notification:
        """
        Persist a notification, then push it to every connected client.

        Raises:
            Whatever the insert raised; no broadcast happens in that case
        """
        notification = await self.create_notification(title, description, notification_type)
        if self.broadcaster is not None:
            await self.broadcaster.broadcast_notification(notification)
        else:
            logger.debug("No broadcaster attached; notification stored only")
        return notification

    async def list_latest(self, limit: int = LATEST_LIMIT) -> List[Notification]:
        async with self.get_session() as session:
            result = await session.execute(
                select(Notification)
                .order_by(Notification.created_at.desc())
                .limit(min(limit, self.LATEST_LIMIT))
            )
            return list(result.scalars().all())

    async def count_unread(self) -> int:
        async with self.get_session() as session:
            result = await session.execute(
                select(func.count(Notification.id)).where(Notification.read.is_(False))
            )
            return result.scalar_one()

    async def mark_read(
        self, notification_id: Union[UUID, str], read: bool = True
    ) -> Optional[Notification]:
        notification_id = self.validate_uuid(notification_id, "notification_id")
        async with self.get_session() as session:
            notification = await session.get(Notification, notification_id)
            if notification is None:
                return None
            notification.read = read
        return notification

    async def delete_notification(self, notification_id: Union[UUID, str]) -> bool:
        notification_id = self.validate_uuid(notification_id, "notification_id")
        async with self.get_session() as session:
            result = await session.execute(
                delete(Notification).where(Notification.id == notification_id)
            )
            deleted = result.rowcount > 0
        if deleted:
            self.log_operation("DELETE", notification_id)
        return deleted
