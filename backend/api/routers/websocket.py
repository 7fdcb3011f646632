"""WebSocket endpoint carrying the room event channel.

Inbound frames are JSON objects ``{"event": ..., "data": ...}`` and are
handed to the SessionService one at a time per connection.
"""

import json

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from api.services.session_service import SessionService, get_session_service
from common.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    sessions: SessionService = Depends(get_session_service),
):
    """WebSocket endpoint for collaborative rooms.

    Handles:
    - createRoom: create (or reset) a room and join it
    - joinRoom: join an existing room, answered with codeUpdate or error
    - codeChange: replace the room buffer, relayed to the other members
    - compile: run code in the sandbox, compileResult sent to the whole room
    """
    await websocket.accept()
    connection_id = sessions.connections.connect(websocket)
    logger.info(f"A user connected: {connection_id}")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            # Binary frames are accepted when they hold UTF-8 JSON
            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""
            try:
                message = json.loads(raw)
            except ValueError:
                await sessions.connections.send(
                    connection_id, "error", "Invalid payload: frame is not valid JSON"
                )
                continue

            await sessions.dispatch(connection_id, message)

    except WebSocketDisconnect:
        logger.info(f"User disconnected: {connection_id}")
    finally:
        await sessions.disconnect(connection_id)
