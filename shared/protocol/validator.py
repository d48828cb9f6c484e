from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jsonschema

from .events import ChatEvent, normalize_event
from .errors import ErrorCode, ProtocolError

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping outbound event -> schema filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    ChatEvent.JOIN_ROOM.value: "joinRoom.json",
    ChatEvent.LEAVE_ROOM.value: "leaveRoom.json",
    ChatEvent.CHAT_MESSAGE.value: "chatMessage.json",
    ChatEvent.FETCH_PREVIOUS_MESSAGES.value: "fetchPreviousMessages.json",
    ChatEvent.MARK_MESSAGES_AS_READ.value: "markMessagesAsRead.json",
    ChatEvent.MESSAGE_REACTION.value: "messageReaction.json",
}


def _schema_path(event: str) -> Optional[Path]:
    filename = SCHEMA_REGISTRY.get(event)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    return path if path.exists() else None


@lru_cache(maxsize=16)
def load_schema(event: Union[str, ChatEvent]) -> Optional[dict]:
    """Load JSON schema for an outbound event if one is registered."""
    path = _schema_path(normalize_event(event))
    if not path:
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_payload(event: Union[str, ChatEvent], payload: Any, schema: Optional[dict] = None) -> None:
    """Check an outbound payload against its event schema; unregistered events pass."""
    if schema is None:
        schema = load_schema(normalize_event(event))
    if not schema:
        return
    try:
        jsonschema.validate(instance=payload, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ProtocolError(
            ErrorCode.SCHEMA_INVALID,
            f"Payload for {normalize_event(event)} failed schema validation: {exc.message}",
        ) from exc


__all__ = ["SCHEMA_DIR", "SCHEMA_REGISTRY", "load_schema", "validate_payload"]
