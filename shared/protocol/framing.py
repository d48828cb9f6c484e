from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Awaitable, Dict, Optional, Protocol, Union

from .constants import EVENT_PREFIX, MAX_LOGGED_FRAME, PONG_FRAME, MessageType, PacketType
from .errors import MalformedPacketError, SerializationError
from .events import ChatEvent, normalize_event
from .messages import HEARTBEAT_HANDLED, DecodedEvent, DecodeResult, FrameKind

logger = logging.getLogger(__name__)


class FrameTransport(Protocol):
    """Duplex text-frame channel; only the outbound half is used by the codec."""

    def send(self, text: str) -> Union[None, Awaitable[None]]: ...


def _truncate(frame: str) -> str:
    return frame if len(frame) <= MAX_LOGGED_FRAME else frame[:MAX_LOGGED_FRAME] + "..."


def encode_event(event_name: Union[str, ChatEvent], payload: Any = None) -> str:
    """Encode an application event into a ``42["name", payload]`` frame."""
    name = normalize_event(event_name) if isinstance(event_name, ChatEvent) else event_name
    if not isinstance(name, str) or not name:
        raise SerializationError(f"Event name must be a non-empty string, got {event_name!r}")
    try:
        body = json.dumps([name, payload], ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(f"Encode failed for {name}: {exc}") from exc
    return EVENT_PREFIX + body


def encode_connect(auth: Optional[Dict[str, Any]] = None) -> str:
    """Encode a Socket.IO CONNECT for the default namespace, with optional auth data."""
    frame = PacketType.MESSAGE.value + MessageType.CONNECT.value
    if auth is None:
        return frame
    try:
        return frame + json.dumps(auth, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Encode failed for connect auth: {exc}") from exc


def classify_frame(frame: Any) -> FrameKind:
    """Decide how a frame is dispatched. PING wins over everything else."""
    if not isinstance(frame, str):
        return FrameKind.IGNORED
    if frame.startswith(PacketType.PING):
        return FrameKind.HEARTBEAT
    if frame.startswith(EVENT_PREFIX):
        return FrameKind.EVENT
    return FrameKind.IGNORED


def parse_event_body(frame: str) -> DecodedEvent:
    """Parse a ``42``-prefixed frame into its event name and data."""
    try:
        parsed = json.loads(frame[len(EVENT_PREFIX) :])
    except (json.JSONDecodeError, RecursionError) as exc:
        raise MalformedPacketError(frame, f"Invalid JSON in event packet: {exc}") from exc

    if not isinstance(parsed, list) or len(parsed) != 2:
        raise MalformedPacketError(frame, "Event body must be a 2-element [name, data] array")
    event_name, data = parsed
    if not isinstance(event_name, str):
        raise MalformedPacketError(frame, f"Event name must be a string, got {type(event_name).__name__}")
    return DecodedEvent(event_name=event_name, data=data)


class SocketIOCodec:
    """
    Per-connection Socket.IO framing codec.

    Holds nothing but the transport handle: every frame is decoded on its own,
    PINGs are answered on the spot and unrecognised packet types are dropped.
    Build one instance per connection and feed it frames in arrival order.
    """

    def __init__(self, transport: FrameTransport) -> None:
        self.transport = transport

    def encode(self, event_name: Union[str, ChatEvent], payload: Any = None) -> str:
        return encode_event(event_name, payload)

    def decode(self, frame: Any) -> DecodeResult:
        """Decode one inbound frame, answering PING with PONG before returning."""
        kind = classify_frame(frame)
        if kind is FrameKind.HEARTBEAT:
            self.transport.send(PONG_FRAME)
            return HEARTBEAT_HANDLED
        return self._decode_other(kind, frame)

    async def async_decode(self, frame: Any) -> DecodeResult:
        """Same as :meth:`decode` for transports whose ``send`` is a coroutine."""
        kind = classify_frame(frame)
        if kind is FrameKind.HEARTBEAT:
            result = self.transport.send(PONG_FRAME)
            if inspect.isawaitable(result):
                await result
            return HEARTBEAT_HANDLED
        return self._decode_other(kind, frame)

    def _decode_other(self, kind: FrameKind, frame: Any) -> Optional[DecodedEvent]:
        if kind is FrameKind.EVENT:
            return parse_event_body(frame)
        if isinstance(frame, str):
            logger.debug("Ignoring packet %s", _truncate(frame))
        else:
            logger.debug("Ignoring non-text frame (%s)", type(frame).__name__)
        return None


__all__ = [
    "FrameTransport",
    "SocketIOCodec",
    "encode_event",
    "encode_connect",
    "classify_frame",
    "parse_event_body",
]
