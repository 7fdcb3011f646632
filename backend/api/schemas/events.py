"""Pydantic schemas for the room event channel.

Every frame is ``{"event": <name>, "data": <payload>}`` in both directions.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

InboundEvent = Literal["createRoom", "joinRoom", "codeChange", "compile"]
OutboundEvent = Literal["codeUpdate", "compileResult", "error"]

RoomId = Annotated[str, Field(min_length=1, max_length=256)]

room_id_adapter: TypeAdapter[str] = TypeAdapter(RoomId)


class InboundMessage(BaseModel):
    """A client to server frame."""

    event: InboundEvent
    data: Any = None


class CodePayload(BaseModel):
    """Payload of ``codeChange`` and ``compile``."""

    model_config = ConfigDict(populate_by_name=True)

    room_id: RoomId = Field(..., alias="roomId")
    code: str = Field(..., description="Full buffer text")


class CompileError(BaseModel):
    """Failure payload of ``compileResult``."""

    error: str = Field(..., description="Diagnostic message")
    error_type: str | None = Field(default=None, description="Failure kind, e.g. NameError")


class OutboundMessage(BaseModel):
    """A server to client frame."""

    event: OutboundEvent
    data: str | CompileError
