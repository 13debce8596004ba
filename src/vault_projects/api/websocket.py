"""WebSocket endpoint for index change notifications."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from vault_projects.factory import get_broadcaster

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Keep a client subscribed to `reindexed` messages.

    Args:
        websocket: WebSocket connection
    """
    broadcaster = get_broadcaster()
    await broadcaster.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("[WebSocket] Client disconnected normally")
        broadcaster.disconnect(websocket)
    except Exception as e:
        logger.error(f"[WebSocket] Error: {e}", exc_info=True)
        broadcaster.disconnect(websocket)
