"""API services package."""

from api.services.connection_manager import ConnectionManager, get_connection_manager
from api.services.executor_service import ExecutorService, get_executor_service
from api.services.room_registry import Room, RoomNotFoundError, RoomRegistry, get_room_registry
from api.services.session_service import SessionService, get_session_service

__all__ = [
    "ConnectionManager",
    "ExecutorService",
    "Room",
    "RoomNotFoundError",
    "RoomRegistry",
    "SessionService",
    "get_connection_manager",
    "get_executor_service",
    "get_room_registry",
    "get_session_service",
]
