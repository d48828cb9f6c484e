"""Engine.IO / Socket.IO wire constants shared by codec and client."""

from __future__ import annotations

from enum import StrEnum


class PacketType(StrEnum):
    """Engine.IO packet codes (first character of every frame)."""

    OPEN = "0"
    CLOSE = "1"
    PING = "2"
    PONG = "3"
    MESSAGE = "4"
    UPGRADE = "5"
    NOOP = "6"


class MessageType(StrEnum):
    """Socket.IO packet codes, carried right after an Engine.IO MESSAGE."""

    CONNECT = "0"
    DISCONNECT = "1"
    EVENT = "2"
    ACK = "3"
    ERROR = "4"
    BINARY_EVENT = "5"
    BINARY_ACK = "6"


EVENT_PREFIX = PacketType.MESSAGE.value + MessageType.EVENT.value  # "42"
PONG_FRAME = PacketType.PONG.value
MAX_LOGGED_FRAME = 200

__all__ = [
    "PacketType",
    "MessageType",
    "EVENT_PREFIX",
    "PONG_FRAME",
    "MAX_LOGGED_FRAME",
]
