from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict


class ErrorCode(IntEnum):
    """Failure categories surfaced by the protocol layer."""

    SERIALIZATION_FAILED = 1001
    MALFORMED_PACKET = 1002
    SCHEMA_INVALID = 1003
    TRANSPORT_FAILED = 1004


class ProtocolError(Exception):
    """Structured protocol exception carrying an error code + message."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.name} ({int(code)}): {message}")

    def to_payload(self) -> Dict[str, Any]:
        """Map error into a dict suitable for diagnostics and log records."""
        return {
            "error_code": int(self.code),
            "error_name": self.code.name,
            "error_message": self.message,
        }


class SerializationError(ProtocolError):
    """Outbound event could not be turned into JSON text."""

    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.SERIALIZATION_FAILED, message)


class MalformedPacketError(ProtocolError):
    """Inbound EVENT frame whose body is not a ``[name, data]`` JSON array."""

    def __init__(self, frame: str, message: str = "") -> None:
        self.frame = frame
        super().__init__(ErrorCode.MALFORMED_PACKET, message)

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["frame"] = self.frame
        return payload


__all__ = ["ErrorCode", "ProtocolError", "SerializationError", "MalformedPacketError"]
