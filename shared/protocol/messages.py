from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ErrorCode, ProtocolError
from .events import is_error_event


class FrameKind(StrEnum):
    """How a single inbound frame is dispatched."""

    HEARTBEAT = "heartbeat"
    EVENT = "event"
    IGNORED = "ignored"


class DecodedEvent(BaseModel):
    """Application event carried by one ``42[...]`` frame."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[FrameKind.EVENT] = FrameKind.EVENT
    event_name: str
    data: Any = None

    @property
    def is_error(self) -> bool:
        return is_error_event(self.event_name)


class HeartbeatHandled(BaseModel):
    """PING consumed by the codec; PONG already written back."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[FrameKind.HEARTBEAT] = FrameKind.HEARTBEAT


# None stands for "nothing to do" (CONNECT, DISCONNECT, ACK, ...).
DecodeResult = Union[DecodedEvent, HeartbeatHandled, None]

HEARTBEAT_HANDLED = HeartbeatHandled()


class EventPayload(BaseModel):
    """Base for JSON objects carried as event data. Field names follow the service (camelCase)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_data(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_data(cls, data: Any) -> "EventPayload":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(ErrorCode.SCHEMA_INVALID, f"{cls.__name__} validation failed: {exc}") from exc


# Outbound payloads


class ChatMessagePayload(EventPayload):
    room: str
    type: str = "text"
    content: str


class FetchPreviousMessagesPayload(EventPayload):
    room_id: str = Field(alias="roomId")
    limit: int = Field(default=30, gt=0)
    before: Optional[int] = Field(default=None, description="Epoch milliseconds upper bound")


class MarkMessagesAsReadPayload(EventPayload):
    room_id: str = Field(alias="roomId")
    message_ids: list[str] = Field(alias="messageIds", min_length=1)


class MessageReactionPayload(EventPayload):
    message_id: str = Field(alias="messageId")
    reaction: str
    type: Literal["add", "remove"] = "add"


# Inbound payloads


class JoinRoomSuccessPayload(EventPayload):
    room_id: str = Field(alias="roomId")
    participants: list[Any] = Field(default_factory=list)


class MessageBroadcastPayload(EventPayload):
    timestamp: Optional[float] = Field(default=None, description="Server creation time, epoch milliseconds")
    content: Optional[str] = None


class PreviousMessagesLoadedPayload(EventPayload):
    messages: list[Any] = Field(default_factory=list)
    has_more: Optional[bool] = Field(default=None, alias="hasMore")


class ServerErrorPayload(EventPayload):
    code: Optional[str] = None
    message: Optional[str] = None


__all__ = [
    "FrameKind",
    "DecodedEvent",
    "HeartbeatHandled",
    "HEARTBEAT_HANDLED",
    "DecodeResult",
    "EventPayload",
    "ChatMessagePayload",
    "FetchPreviousMessagesPayload",
    "MarkMessagesAsReadPayload",
    "MessageReactionPayload",
    "JoinRoomSuccessPayload",
    "MessageBroadcastPayload",
    "PreviousMessagesLoadedPayload",
    "ServerErrorPayload",
]
