"""
Shared protocol package: Engine.IO/Socket.IO constants, chat event names,
the framing codec, result/payload models and outbound payload validation.
"""

from .constants import EVENT_PREFIX, PONG_FRAME, MessageType, PacketType
from .errors import ErrorCode, MalformedPacketError, ProtocolError, SerializationError
from .events import ChatEvent, events_in_group, is_error_event, is_known_event, normalize_event
from .framing import FrameTransport, SocketIOCodec, classify_frame, encode_connect, encode_event, parse_event_body
from .messages import (
    HEARTBEAT_HANDLED,
    ChatMessagePayload,
    DecodedEvent,
    DecodeResult,
    EventPayload,
    FetchPreviousMessagesPayload,
    FrameKind,
    HeartbeatHandled,
    JoinRoomSuccessPayload,
    MarkMessagesAsReadPayload,
    MessageBroadcastPayload,
    MessageReactionPayload,
    PreviousMessagesLoadedPayload,
    ServerErrorPayload,
)
from .validator import load_schema, validate_payload

__all__ = [
    "EVENT_PREFIX",
    "PONG_FRAME",
    "MessageType",
    "PacketType",
    "ErrorCode",
    "MalformedPacketError",
    "ProtocolError",
    "SerializationError",
    "ChatEvent",
    "events_in_group",
    "is_error_event",
    "is_known_event",
    "normalize_event",
    "FrameTransport",
    "SocketIOCodec",
    "classify_frame",
    "encode_connect",
    "encode_event",
    "parse_event_body",
    "HEARTBEAT_HANDLED",
    "ChatMessagePayload",
    "DecodedEvent",
    "DecodeResult",
    "EventPayload",
    "FetchPreviousMessagesPayload",
    "FrameKind",
    "HeartbeatHandled",
    "JoinRoomSuccessPayload",
    "MarkMessagesAsReadPayload",
    "MessageBroadcastPayload",
    "MessageReactionPayload",
    "PreviousMessagesLoadedPayload",
    "ServerErrorPayload",
    "load_schema",
    "validate_payload",
]
