"""In-memory registry of rooms, their shared buffer and their members.

Rooms live for the lifetime of the process. The registry is the only writer
of a room's buffer; every read-modify-write happens under one lock because
sandbox runs finish on worker threads.
"""

import threading
from dataclasses import dataclass, field

from common.logging import get_logger

logger = get_logger(__name__)


class RoomNotFoundError(Exception):
    """Raised when an operation targets a room that was never created."""

    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room '{room_id}' does not exist")
        self.room_id = room_id


@dataclass
class Room:
    """A collaborative session: one shared buffer and its connected members."""

    id: str
    buffer: str = ""
    members: set[str] = field(default_factory=set)


class RoomRegistry:
    """Authoritative store of room buffers and membership."""

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def _get(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def create_room(self, room_id: str, connection_id: str) -> Room:
        """Create (or reset) a room with an empty buffer and join its creator.

        Re-creating an existing id clears its buffer; members already in the
        room stay joined.
        """
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(id=room_id)
                self._rooms[room_id] = room
            else:
                logger.warning(f"Room {room_id} already existed, resetting its buffer")
                room.buffer = ""
            room.members.add(connection_id)
        logger.info(f"Room created: {room_id}")
        return room

    def join_room(self, room_id: str, connection_id: str) -> str:
        """Add a member and return the room's current buffer.

        Raises:
            RoomNotFoundError: If the room was never created.
        """
        with self._lock:
            room = self._get(room_id)
            room.members.add(connection_id)
            buffer = room.buffer
        logger.info(f"Connection {connection_id} joined room: {room_id}")
        return buffer

    def apply_edit(self, room_id: str, connection_id: str, code: str) -> frozenset[str]:
        """Replace the buffer with an edit.

        Returns:
            The members that should receive the edit (everyone but the sender).

        Raises:
            RoomNotFoundError: If the room was never created.
        """
        with self._lock:
            room = self._get(room_id)
            room.buffer = code
            recipients = frozenset(room.members - {connection_id})
        logger.debug(f"Room {room_id} edited by {connection_id} ({len(code)} chars)")
        return recipients

    def record_compile_output(self, room_id: str, output: str) -> None:
        """Replace the buffer with the output of a successful run.

        Raises:
            RoomNotFoundError: If the room was never created.
        """
        with self._lock:
            self._get(room_id).buffer = output

    def get_buffer(self, room_id: str) -> str:
        """Return the room's current buffer.

        Raises:
            RoomNotFoundError: If the room was never created.
        """
        with self._lock:
            return self._get(room_id).buffer

    def members(self, room_id: str) -> frozenset[str]:
        """Snapshot of a room's members; empty for unknown rooms."""
        with self._lock:
            room = self._rooms.get(room_id)
            return frozenset(room.members) if room else frozenset()

    def leave_all(self, connection_id: str) -> list[str]:
        """Remove a connection from every room it joined.

        Returns:
            The ids of the rooms it left.
        """
        left = []
        with self._lock:
            for room in self._rooms.values():
                if connection_id in room.members:
                    room.members.discard(connection_id)
                    left.append(room.id)
        return left


# Singleton instance for dependency injection
_room_registry: RoomRegistry | None = None


def get_room_registry() -> RoomRegistry:
    """Get the room registry instance (dependency injection)."""
    global _room_registry
    if _room_registry is None:
        _room_registry = RoomRegistry()
    return _room_registry
