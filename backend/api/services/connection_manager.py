"""Live WebSocket connections and outbound event delivery."""

import asyncio
import uuid
from collections.abc import Iterable

from fastapi import WebSocket

from api.schemas.events import CompileError, OutboundEvent, OutboundMessage
from common.logging import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    """Tracks connection_id -> WebSocket for this process."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def connect(self, websocket: WebSocket) -> str:
        """Register an accepted socket and return its new connection id."""
        connection_id = str(uuid.uuid4())
        self._connections[connection_id] = websocket
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)

    async def send(
        self,
        connection_id: str,
        event: OutboundEvent,
        data: str | CompileError,
    ) -> bool:
        """Push one event to a single connection.

        Returns:
            True if the message was sent, False if the connection is gone.
        """
        ws = self._connections.get(connection_id)
        if ws is None:
            return False

        message = OutboundMessage(event=event, data=data)
        try:
            await ws.send_json(message.model_dump())
            return True
        except Exception as e:
            logger.warning(f"Failed to send {event} to connection {connection_id}: {e}")
            self.disconnect(connection_id)
            return False

    async def broadcast(
        self,
        connection_ids: Iterable[str],
        event: OutboundEvent,
        data: str | CompileError,
    ) -> None:
        """Push one event to several connections concurrently."""
        await asyncio.gather(*(self.send(cid, event, data) for cid in connection_ids))


# Singleton instance for dependency injection
_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the connection manager instance (dependency injection)."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager
