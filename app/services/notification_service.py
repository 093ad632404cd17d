# app/services/notification_service.py
from typing import Any, Dict, Set

from fastapi import WebSocket, WebSocketDisconnect

from app.utils.logging import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    """
    Kto jest online: user_id -> otwarte websockety.
    Tworzony w lifespan aplikacji (app.state), zamykany przy shutdown,
    nie ma globalnego stanu na poziomie modulu.
    """

    def __init__(self):
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._closed = False

    def register(self, user_id: str, websocket: WebSocket) -> None:
        if self._closed:
            raise RuntimeError("Connection registry is closed")
        self._connections.setdefault(user_id, set()).add(websocket)
        logger.info(f"User {user_id} connected ({self.connected_count()} online)")

    def unregister(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self._connections.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._connections[user_id]
        logger.info(f"User {user_id} disconnected")

    def is_online(self, user_id: str) -> bool:
        return user_id in self._connections

    def connected_count(self) -> int:
        return len(self._connections)

    async def send_to_user(self, user_id: str, notification: Dict[str, Any]) -> bool:
        sockets = self._connections.get(user_id)
        if not sockets:
            logger.info(f"User {user_id} not connected, notification not delivered")
            return False

        delivered = 0
        for ws in list(sockets):
            try:
                await ws.send_json({"event": "new-notification", "data": notification})
                delivered += 1
            except (RuntimeError, WebSocketDisconnect) as e:
                #martwy socket, wypada z rejestru, reszta dostaje dalej
                logger.warning(f"Dropping dead socket of user {user_id}: {e}")
                self.unregister(user_id, ws)

        if delivered:
            logger.info(f"Sent notification to user {user_id} via WebSocket")
        return delivered > 0

    async def close_all(self) -> None:
        self._closed = True
        for user_id, sockets in list(self._connections.items()):
            for ws in list(sockets):
                try:
                    await ws.close()
                except RuntimeError as e:
                    #socket juz zamkniety po stronie klienta
                    logger.debug(f"Close of socket for {user_id} skipped: {e}")
        self._connections.clear()
