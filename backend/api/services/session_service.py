"""Dispatch of room events coming in over the event channel.

Each inbound event is handled to completion for its connection before the
next one from the same connection is read. Failures are reported back as
events and never close the connection.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from api.schemas.events import CodePayload, CompileError, InboundMessage, room_id_adapter
from api.services.connection_manager import ConnectionManager, get_connection_manager
from api.services.executor_service import ExecutorService, get_executor_service
from api.services.room_registry import RoomNotFoundError, RoomRegistry, get_room_registry
from common.logging import get_logger

logger = get_logger(__name__)

ROOM_NOT_FOUND_MESSAGE = "Room does not exist"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into ``field: message`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "data"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class SessionService:
    """Mediates every room-scoped state transition."""

    def __init__(
        self,
        registry: RoomRegistry,
        connections: ConnectionManager,
        executor: ExecutorService,
    ) -> None:
        self.registry = registry
        self.connections = connections
        self.executor = executor
        self._handlers: dict[str, Callable[[str, Any], Awaitable[None]]] = {
            "createRoom": self.create_room,
            "joinRoom": self.join_room,
            "codeChange": self.code_change,
            "compile": self.compile,
        }

    async def dispatch(self, connection_id: str, message: Any) -> None:
        """Route one raw inbound frame to its handler."""
        try:
            inbound = InboundMessage.model_validate(message)
            await self._handlers[inbound.event](connection_id, inbound.data)
        except ValidationError as e:
            detail = describe_validation_error(e)
            logger.warning(f"Rejected payload from {connection_id}: {detail}")
            await self.connections.send(connection_id, "error", f"Invalid payload: {detail}")
        except Exception:
            logger.exception(f"Unhandled error while processing event from {connection_id}")
            await self.connections.send(connection_id, "error", INTERNAL_ERROR_MESSAGE)

    async def create_room(self, connection_id: str, data: Any) -> None:
        room_id = room_id_adapter.validate_python(data)
        self.registry.create_room(room_id, connection_id)

    async def join_room(self, connection_id: str, data: Any) -> None:
        """Join the sender and sync it with the current buffer."""
        room_id = room_id_adapter.validate_python(data)
        try:
            buffer = self.registry.join_room(room_id, connection_id)
        except RoomNotFoundError:
            logger.info(f"Join rejected, unknown room: {room_id}")
            await self.connections.send(connection_id, "error", ROOM_NOT_FOUND_MESSAGE)
            return
        await self.connections.send(connection_id, "codeUpdate", buffer)

    async def code_change(self, connection_id: str, data: Any) -> None:
        """Store an edit and relay it to the other members."""
        payload = CodePayload.model_validate(data)
        try:
            recipients = self.registry.apply_edit(payload.room_id, connection_id, payload.code)
        except RoomNotFoundError:
            logger.info(f"Edit rejected, unknown room: {payload.room_id}")
            await self.connections.send(connection_id, "error", ROOM_NOT_FOUND_MESSAGE)
            return
        await self.connections.broadcast(recipients, "codeUpdate", payload.code)

    async def compile(self, connection_id: str, data: Any) -> None:
        """Run the submitted code and publish the outcome to the whole room.

        On success the output becomes the room's buffer. On failure the
        buffer is left untouched.
        """
        payload = CodePayload.model_validate(data)
        if payload.room_id not in self.registry:
            logger.info(f"Compile rejected, unknown room: {payload.room_id}")
            await self.connections.send(connection_id, "error", ROOM_NOT_FOUND_MESSAGE)
            return

        logger.info(f"Compiling code for room {payload.room_id} ({len(payload.code)} chars)")
        result = await self.executor.execute(payload.code)

        if result.success:
            self.registry.record_compile_output(payload.room_id, result.output)
            outcome: str | CompileError = result.output
        else:
            logger.info(f"Compile failed in room {payload.room_id}: {result.diagnostic}")
            outcome = CompileError(
                error=f"Some error occurred: {result.diagnostic}",
                error_type=result.error_type,
            )

        recipients = self.registry.members(payload.room_id) | {connection_id}
        await self.connections.broadcast(recipients, "compileResult", outcome)

    async def disconnect(self, connection_id: str) -> None:
        """Forget a closed connection; its rooms keep their buffers."""
        rooms = self.registry.leave_all(connection_id)
        self.connections.disconnect(connection_id)
        logger.info(f"Connection {connection_id} closed (left rooms: {rooms})")


# Singleton instance for dependency injection
_session_service: SessionService | None = None


def get_session_service() -> SessionService:
    """Get the session service instance (dependency injection)."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService(
            registry=get_room_registry(),
            connections=get_connection_manager(),
            executor=get_executor_service(),
        )
    return _session_service
