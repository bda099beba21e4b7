"""
Notification Broadcaster
------------------------
Registry of open WebSocket connections with heartbeat, broadcast and
per-user delivery.

One broadcaster is created by the application factory and stored on
``app.state.notification_broadcaster``. Delivery is best-effort: a failed
send drops that connection, is reported on the side-effect channel and
never affects delivery to the other connections.

Wire format (JSON text frames):
    client -> server: {"type": "auth", "userId": ...}, {"type": "ping"}
    server -> client: {"type": "notification", "data": ...},
                      {"type": "gallery_update", "data": ...},
                      {"type": "ping"}, {"type": "pong"}
Any inbound frame counts as a heartbeat answer.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from fastapi import FastAPI, Request, WebSocket
from loguru import logger
from pydantic_core import to_jsonable_python

from ngo_portal.core.config_manager import settings
from ngo_portal.core.side_effects import SideEffectChannel, side_effects
from ngo_portal.models.db_tables import Notification
from ngo_portal.models.response_models import NotificationResponse


class ClientConnection:
    """One open WebSocket plus its heartbeat and identity state."""

    def __init__(self, websocket: WebSocket, user_id: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = uuid4().hex
        self.user_id = user_id
        self.verified_user_id = user_id
        self.is_alive = True
        self.connected_at = datetime.now(timezone.utc)
        # Serializes frames so each connection sees messages in send order
        self._send_lock = asyncio.Lock()

    async def send_json(self, message: Dict[str, Any]) -> None:
        async with self._send_lock:
            await self.websocket.send_text(json.dumps(message))

    async def close(self, code: int = 1000) -> None:
        try:
            await self.websocket.close(code=code)
        except (RuntimeError, OSError) as e:
            # Already closed by the peer or by a previous sweep
            logger.debug(f"Connection {self.connection_id} already closed: {e}")

    def __repr__(self) -> str:
        return f"ClientConnection(id={self.connection_id}, user_id={self.user_id})"


class NotificationBroadcaster:
    """Tracks connections and fans messages out to them."""

    def __init__(
        self,
        heartbeat_interval_seconds: Optional[float] = None,
        channel: Optional[SideEffectChannel] = None,
    ):
        self.heartbeat_interval_seconds = (
            heartbeat_interval_seconds or settings.ws_heartbeat_interval_seconds
        )
        self.channel = channel or side_effects
        self._connections: Dict[str, ClientConnection] = {}
        self._heartbeat_task: Optional[asyncio.Task] = None

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def initialize(self, app: Optional[FastAPI] = None) -> None:
        """Attach to ``app`` and start the heartbeat task."""
        if app is not None:
            app.state.notification_broadcaster = self
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.create_task(
                self._heartbeat_loop(), name="ws-heartbeat"
            )
        logger.info(
            f"Notification broadcaster started "
            f"(heartbeat every {self.heartbeat_interval_seconds}s)"
        )

    async def shutdown(self) -> None:
        """Stop the heartbeat and close every connection."""
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass
            self._heartbeat_task = None

        connections = list(self._connections.values())
        self._connections.clear()
        for connection in connections:
            await connection.close(code=1001)
        logger.info(f"Notification broadcaster stopped, {len(connections)} connection(s) closed")

    # ========================================================================
    # REGISTRY
    # ========================================================================

    def register(
        self, websocket: WebSocket, user_id: Optional[str] = None
    ) -> ClientConnection:
        connection = ClientConnection(websocket, user_id=user_id)
        self._connections[connection.connection_id] = connection
        logger.debug(f"WebSocket registered: {connection!r}")
        return connection

    def unregister(self, connection: ClientConnection) -> None:
        if self._connections.pop(connection.connection_id, None) is not None:
            logger.debug(f"WebSocket unregistered: {connection!r}")

    @property
    def connections(self) -> List[ClientConnection]:
        return list(self._connections.values())

    @property
    def connected_clients_count(self) -> int:
        return len(self._connections)

    # ========================================================================
    # INBOUND MESSAGES
    # ========================================================================

    async def handle_message(self, connection: ClientConnection, raw_message: str) -> None:
        """
        Process one inbound frame.

        Malformed JSON and unknown message types are logged and ignored.
        """
        connection.is_alive = True

        try:
            message = json.loads(raw_message)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed WebSocket frame on {connection!r}: {e}")
            return
        if not isinstance(message, dict):
            logger.warning(f"Ignoring non-object WebSocket frame on {connection!r}")
            return

        message_type = message.get("type")
        if message_type == "auth":
            self._bind_user(connection, message.get("userId"))
        elif message_type == "ping":
            await self._deliver(connection, {"type": "pong"})
        elif message_type == "pong":
            pass
        else:
            logger.debug(f"Unhandled WebSocket message type: {message_type}")

    def _bind_user(self, connection: ClientConnection, user_id: Any) -> None:
        if not user_id:
            return
        user_id = str(user_id)
        if connection.verified_user_id and connection.verified_user_id != user_id:
            logger.warning(
                f"Rejected auth as {user_id} on connection bound to "
                f"{connection.verified_user_id}"
            )
            return
        connection.user_id = user_id
        logger.debug(f"WebSocket {connection.connection_id} bound to user {user_id}")

    # ========================================================================
    # HEARTBEAT
    # ========================================================================

    async def heartbeat_tick(self) -> int:
        """
        One heartbeat sweep.

        Connections that stayed silent since the previous sweep are closed and
        removed; the rest are marked not-alive and pinged.

        Returns:
            Number of connections removed
        """
        removed = 0
        survivors = []
        for connection in self.connections:
            if not connection.is_alive:
                self.unregister(connection)
                await connection.close(code=1001)
                removed += 1
                continue
            connection.is_alive = False
            survivors.append(connection)

        await self._fan_out(survivors, {"type": "ping"})
        if removed:
            logger.info(f"Heartbeat removed {removed} unresponsive connection(s)")
        return removed

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval_seconds)
            try:
                await self.heartbeat_tick()
            except Exception as e:
                logger.exception(f"Heartbeat sweep failed: {e}")

    # ========================================================================
    # OUTBOUND MESSAGES
    # ========================================================================

    async def _deliver(self, connection: ClientConnection, message: Dict[str, Any]) -> bool:
        try:
            await connection.send_json(message)
            return True
        except Exception as e:
            self.unregister(connection)
            self.channel.record_failure(f"ws_send:{connection.connection_id}", e)
            return False

    async def _fan_out(
        self, targets: Iterable[ClientConnection], message: Dict[str, Any]
    ) -> int:
        targets = list(targets)
        if not targets:
            return 0
        results = await asyncio.gather(
            *(self._deliver(connection, message) for connection in targets)
        )
        return sum(1 for delivered in results if delivered)

    @staticmethod
    def _serialize(payload: Any) -> Any:
        if isinstance(payload, Notification):
            return NotificationResponse.model_validate(payload).model_dump(
                mode="json", by_alias=True
            )
        return to_jsonable_python(payload)

    async def broadcast_notification(self, notification: Any) -> int:
        """Send a notification to every open connection; returns deliveries."""
        message = {"type": "notification", "data": self._serialize(notification)}
        delivered = await self._fan_out(self.connections, message)
        logger.debug(f"Notification broadcast to {delivered} connection(s)")
        return delivered

    async def broadcast_gallery_update(self, update: Any) -> int:
        message = {"type": "gallery_update", "data": self._serialize(update)}
        return await self._fan_out(self.connections, message)

    async def send_to_user(self, user_id: Any, notification: Any) -> int:
        """Send a notification to connections authenticated as ``user_id``."""
        user_id = str(user_id)
        targets = [c for c in self.connections if c.user_id == user_id]
        message = {"type": "notification", "data": self._serialize(notification)}
        return await self._fan_out(targets, message)


def get_notification_broadcaster(request: Request) -> Optional[NotificationBroadcaster]:
    """FastAPI dependency returning the application's broadcaster, if started."""
    return getattr(request.app.state, "notification_broadcaster", None)
