"""Pytest configuration and fixtures.

This module sets up test environment variables BEFORE any application
modules are imported, ensuring Settings picks them up in CI.
"""

import os

# Set test environment variables before any imports that might trigger Settings
# This runs at pytest collection time, before test modules are imported
os.environ.setdefault("APP_NAME", "code-rooms-test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("HOST", "127.0.0.1")
os.environ.setdefault("PORT", "3000")
os.environ.setdefault("CORS_ORIGINS", '["http://localhost:5173"]')
os.environ.setdefault("EXECUTION_TIMEOUT_SECONDS", "10")
os.environ.setdefault("MAX_CODE_SIZE_BYTES", "10240")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from fastapi.testclient import TestClient


class RecordingConnections:
    """Stand-in for ConnectionManager that records every outbound event."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, object]] = []
        self.disconnected: list[str] = []

    async def send(self, connection_id, event, data) -> bool:
        self.sent.append((connection_id, event, data))
        return True

    async def broadcast(self, connection_ids, event, data) -> None:
        for connection_id in sorted(connection_ids):
            await self.send(connection_id, event, data)

    def disconnect(self, connection_id) -> None:
        self.disconnected.append(connection_id)

    def to(self, connection_id: str) -> list[tuple[str, object]]:
        """Events delivered to one connection, in order."""
        return [(event, data) for cid, event, data in self.sent if cid == connection_id]


@pytest.fixture
def registry():
    """A fresh, empty room registry."""
    from api.services.room_registry import RoomRegistry

    return RoomRegistry()


@pytest.fixture
def connections() -> RecordingConnections:
    """Outbound event recorder."""
    return RecordingConnections()


@pytest.fixture
def client():
    """Create a test client whose rooms start empty for every test."""
    # Import here to ensure env vars are set first
    from api.main import app
    from api.services.connection_manager import ConnectionManager
    from api.services.executor_service import ExecutorService
    from api.services.room_registry import RoomRegistry, get_room_registry
    from api.services.session_service import SessionService, get_session_service

    registry = RoomRegistry()
    sessions = SessionService(
        registry=registry,
        connections=ConnectionManager(),
        executor=ExecutorService(),
    )

    app.dependency_overrides[get_room_registry] = lambda: registry
    app.dependency_overrides[get_session_service] = lambda: sessions

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_room_registry, None)
    app.dependency_overrides.pop(get_session_service, None)


@pytest.fixture
def mock_env_vars():
    """Fixture providing standard test environment variables."""
    return {
        "APP_NAME": "code-rooms-test",
        "DEBUG": "false",
        "ENVIRONMENT": "testing",
        "HOST": "127.0.0.1",
        "PORT": "3000",
        "CORS_ORIGINS": '["http://localhost:5173"]',
        "EXECUTION_TIMEOUT_SECONDS": "10",
        "MAX_CODE_SIZE_BYTES": "10240",
    }
