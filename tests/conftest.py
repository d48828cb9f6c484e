from __future__ import annotations

import asyncio
from typing import List

import pytest


class RecordingTransport:
    """Synchronous text-frame transport that keeps every write."""

    def __init__(self) -> None:
        self.sent: List[str] = []

    def send(self, text: str) -> None:
        self.sent.append(text)


class AsyncRecordingTransport:
    """Coroutine-based transport shaped like a websockets connection."""

    def __init__(self) -> None:
        self.sent: List[str] = []
        self.closed = False

    async def send(self, text: str) -> None:
        self.sent.append(text)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def async_transport() -> AsyncRecordingTransport:
    return AsyncRecordingTransport()


@pytest.fixture
def client_config():
    return {
        "base_url": "ws://127.0.0.1:1/socket.io/?EIO=4&transport=websocket",
        "test_room_id": "507f1f77bcf86cd799439011",
        "open_timeout": 1,
        "reconnect_backoff": 0,
        "max_reconnect_backoff": 0,
        "max_reconnect_retries": 0,
        "request_timeout": 1,
        "log_level": "DEBUG",
        "debug_mode": True,
        "validate_payloads": True,
    }


class ScriptedWebSocket(AsyncRecordingTransport):
    """Async-iterable connection that yields queued frames; ``None`` ends the stream."""

    def __init__(self, frames=()) -> None:
        super().__init__()
        self.frames: asyncio.Queue = asyncio.Queue()
        for frame in frames:
            self.frames.put_nowait(frame)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.frames.get()
        if frame is None:
            raise StopAsyncIteration
        return frame
