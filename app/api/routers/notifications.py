# app/api/routers/notifications.py
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query

from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, user_id: str = Query(...)):
    registry = websocket.app.state.connections

    await websocket.accept()
    registry.register(user_id, websocket)
    try:
        while True:
            message = await websocket.receive_json()
            if message.get("event") == "subscribe":
                logger.info(f"User {user_id} subscribed to notifications")
                await websocket.send_json(
                    {"message": "Subscribed to notifications", "userId": user_id}
                )
            else:
                await websocket.send_json({"error": "Unknown event"})
    except WebSocketDisconnect:
        pass
    finally:
        registry.unregister(user_id, websocket)
