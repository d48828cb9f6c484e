from __future__ import annotations

from enum import StrEnum
from typing import Dict, Iterable, Union


class ChatEvent(StrEnum):
    """
    Event names spoken by the chat service over Socket.IO EVENT frames.
    Outbound names are what the client emits, inbound names are what the server pushes.
    """

    # Room domain
    JOIN_ROOM = "joinRoom"
    JOIN_ROOM_SUCCESS = "joinRoomSuccess"
    JOIN_ROOM_ERROR = "joinRoomError"
    LEAVE_ROOM = "leaveRoom"

    # Messaging domain
    CHAT_MESSAGE = "chatMessage"
    MESSAGE = "message"
    FETCH_PREVIOUS_MESSAGES = "fetchPreviousMessages"
    MESSAGE_LOAD_START = "messageLoadStart"
    PREVIOUS_MESSAGES_LOADED = "previousMessagesLoaded"

    # Interaction domain
    MARK_MESSAGES_AS_READ = "markMessagesAsRead"
    MESSAGES_READ = "messagesRead"
    MESSAGE_REACTION = "messageReaction"
    MESSAGE_REACTION_UPDATE = "messageReactionUpdate"

    # Generic server-side failure
    ERROR = "error"


EVENT_GROUPS: Dict[str, str] = {
    ChatEvent.JOIN_ROOM.value: "room",
    ChatEvent.JOIN_ROOM_SUCCESS.value: "room",
    ChatEvent.JOIN_ROOM_ERROR.value: "room",
    ChatEvent.LEAVE_ROOM.value: "room",
    ChatEvent.CHAT_MESSAGE.value: "message",
    ChatEvent.MESSAGE.value: "message",
    ChatEvent.FETCH_PREVIOUS_MESSAGES.value: "message",
    ChatEvent.MESSAGE_LOAD_START.value: "message",
    ChatEvent.PREVIOUS_MESSAGES_LOADED.value: "message",
    ChatEvent.MARK_MESSAGES_AS_READ.value: "interaction",
    ChatEvent.MESSAGES_READ.value: "interaction",
    ChatEvent.MESSAGE_REACTION.value: "interaction",
    ChatEvent.MESSAGE_REACTION_UPDATE.value: "interaction",
    ChatEvent.ERROR.value: "error",
}


def normalize_event(event: Union[str, ChatEvent]) -> str:
    """Convert enum/string into the event name sent on the wire."""
    return event.value if isinstance(event, ChatEvent) else str(event)


def is_known_event(value: str) -> bool:
    """Check if `value` is an event name the chat service is known to use."""
    try:
        ChatEvent(value)
        return True
    except ValueError:
        return False


def is_error_event(value: Union[str, ChatEvent]) -> bool:
    """Server-pushed failures: ``error`` itself or any name mentioning it (``joinRoomError``)."""
    return "error" in normalize_event(value).lower()


def events_in_group(group: str) -> Iterable[str]:
    """Yield event names belonging to the specified logical domain."""
    for event, grp in EVENT_GROUPS.items():
        if grp == group:
            yield event


__all__ = [
    "ChatEvent",
    "EVENT_GROUPS",
    "normalize_event",
    "is_known_event",
    "is_error_event",
    "events_in_group",
]
