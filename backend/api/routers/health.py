"""Health check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from api.services.room_registry import RoomRegistry, get_room_registry
from common.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    rooms: int


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Plain-text liveness probe."""
    return "Server is running"


@router.get("/health", response_model=HealthResponse)
async def health_check(registry: RoomRegistry = Depends(get_room_registry)) -> HealthResponse:
    """
    Health check endpoint.

    Returns the service status, version and the number of live rooms.
    Used by load balancers and monitoring systems.
    """
    return HealthResponse(status="healthy", version=settings.version, rooms=len(registry))
