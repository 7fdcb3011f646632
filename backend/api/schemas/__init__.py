"""API schemas package."""

from api.schemas.events import (
    CodePayload,
    CompileError,
    InboundMessage,
    OutboundMessage,
)

__all__ = [
    "CodePayload",
    "CompileError",
    "InboundMessage",
    "OutboundMessage",
]
