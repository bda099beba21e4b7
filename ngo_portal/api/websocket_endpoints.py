"""
WebSocket Endpoints
-------------------
Realtime notification channel at ``/api/ws/notifications``.

A valid ``accessToken`` cookie on the upgrade request pins the connection to
that user; otherwise the client may bind itself with an ``auth`` frame.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from ngo_portal.auth.jwt_auth_token_service import verify_access_token
from ngo_portal.auth.session_cookies import ACCESS_TOKEN_COOKIE

router = APIRouter(prefix="/api/ws", tags=["Realtime"])


@router.websocket("/notifications")
async def notifications_socket(websocket: WebSocket):
    broadcaster = getattr(websocket.app.state, "notification_broadcaster", None)
    if broadcaster is None:
        logger.error("WebSocket rejected: notification broadcaster not started")
        await websocket.close(code=1011)
        return

    await websocket.accept()
    payload = verify_access_token(websocket.cookies.get(ACCESS_TOKEN_COOKIE))
    connection = broadcaster.register(
        websocket, user_id=str(payload.user_id) if payload else None
    )
    logger.info(f"WebSocket connected: {connection!r}")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            if frame.get("text") is None:
                connection.is_alive = True
                logger.debug(f"Ignoring binary WebSocket frame on {connection!r}")
                continue
            await broadcaster.handle_message(connection, frame["text"])
    except WebSocketDisconnect as e:
        logger.info(f"WebSocket disconnected: {connection!r} (code={e.code})")
    finally:
        broadcaster.unregister(connection)
