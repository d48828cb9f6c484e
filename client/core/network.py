from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Dict, List, Optional, Tuple, Union

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from client.config import CLIENT_CONFIG
from shared.protocol import validator
from shared.protocol.errors import ErrorCode, MalformedPacketError, ProtocolError
from shared.protocol.events import ChatEvent, normalize_event
from shared.protocol.framing import SocketIOCodec, encode_connect
from shared.protocol.messages import DecodedEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DecodedEvent], Awaitable[None]]
DiagnosticSink = Callable[[ProtocolError], None]


class NetworkError(ProtocolError):
    """Transport level error surfaced to higher layers."""

    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.TRANSPORT_FAILED, message)


class SocketClient:
    """Socket.IO-over-WebSocket client: one codec per connection, per-event handlers."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, diagnostics: Optional[DiagnosticSink] = None) -> None:
        self.config = config or CLIENT_CONFIG
        self.url: str = self.config["base_url"]
        self.open_timeout: float = float(self.config["open_timeout"])
        self.request_timeout: float = float(self.config["request_timeout"])
        self.backoff: float = float(self.config["reconnect_backoff"])
        self.max_backoff: float = float(self.config["max_reconnect_backoff"])
        self.max_retries: int = int(self.config["max_reconnect_retries"])
        self.validate_payloads: bool = bool(self.config.get("validate_payloads", True))
        self.diagnostics = diagnostics

        self.transport: Any = None
        self.codec: Optional[SocketIOCodec] = None
        self.connected: bool = False
        self.malformed_frames: int = 0
        self._receive_task: Optional[asyncio.Task] = None
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._waiters: List[Tuple[str, asyncio.Future]] = []

    async def connect(self) -> None:
        if self.connected:
            return

        retries = 0
        delay = self.backoff
        while retries <= self.max_retries:
            try:
                websocket = await websockets.connect(self.url, open_timeout=self.open_timeout)
            except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
                retries += 1
                logger.warning("Connect attempt %s failed: %s", retries, exc)
                if retries > self.max_retries:
                    break
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.max_backoff)
                continue
            logger.info("WebSocket opened to %s", self.url)
            self.attach(websocket)
            await websocket.send(encode_connect())
            self._receive_task = asyncio.create_task(self._receive_loop(), name="sio-recv-loop")
            return
        raise NetworkError("Exceeded max reconnect attempts")

    def attach(self, transport: Any) -> None:
        """Bind an already-open transport (anything with ``send(text)``) and build its codec."""
        self.transport = transport
        self.codec = SocketIOCodec(transport)
        self.connected = True

    async def close(self) -> None:
        self.connected = False
        task = self._receive_task
        if task and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._receive_task = None
        for _, future in self._waiters:
            if not future.done():
                future.cancel()
        if self.transport is not None and hasattr(self.transport, "close"):
            await self.transport.close()
        logger.info("Socket client closed")

    async def emit(self, event: Union[str, ChatEvent], payload: Any = None) -> str:
        """Validate, encode and send one event; returns the frame written."""
        if not self.connected:
            await self.connect()
        assert self.codec is not None
        name = normalize_event(event)
        if self.validate_payloads:
            validator.validate_payload(name, payload)
        frame = self.codec.encode(name, payload)
        try:
            await self.transport.send(frame)
        except ConnectionClosed as exc:
            logger.warning("Connection lost during emit: %s", exc)
            self.connected = False
            raise NetworkError(f"Connection lost: {exc}") from exc
        logger.debug("Emit (%s): %s", name, payload)
        return frame

    async def listen(self, frame: Any) -> Optional[DecodedEvent]:
        """Run one inbound frame through the codec; malformed frames are reported, not raised."""
        assert self.codec is not None
        try:
            result = await self.codec.async_decode(frame)
        except MalformedPacketError as exc:
            self.malformed_frames += 1
            logger.error("Failed to parse socket message: %s", exc.frame)
            if self.diagnostics:
                self.diagnostics(exc)
            return None

        if not isinstance(result, DecodedEvent):
            return None
        if result.is_error:
            logger.error("Server error event (%s): %s", result.event_name, result.data)
        else:
            logger.debug("Received (%s): %s", result.event_name, result.data)
        return result

    def on(self, event: Union[str, ChatEvent], handler: EventHandler) -> None:
        self._handlers.setdefault(normalize_event(event), []).append(handler)

    def expect(self, event: Union[str, ChatEvent]) -> asyncio.Future:
        """Register interest in the next event of the given name; call before emitting the request."""
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._waiters.append((normalize_event(event), future))
        return future

    async def wait_expected(self, future: asyncio.Future, timeout: Optional[float] = None) -> DecodedEvent:
        """Await a future returned by :meth:`expect`."""
        try:
            return await asyncio.wait_for(future, timeout=self.request_timeout if timeout is None else timeout)
        finally:
            self.discard(future)

    def discard(self, future: asyncio.Future) -> None:
        """Drop a waiter registered with :meth:`expect`."""
        self._waiters = [entry for entry in self._waiters if entry[1] is not future]
        if not future.done():
            future.cancel()

    async def wait_for(self, event: Union[str, ChatEvent], timeout: Optional[float] = None) -> DecodedEvent:
        """Resolve with the next decoded event of the given name."""
        return await self.wait_expected(self.expect(event), timeout)

    async def feed(self, frame: Any) -> Optional[DecodedEvent]:
        """Decode one frame and dispatch the resulting event, as the receive loop does."""
        event = await self.listen(frame)
        if event is not None:
            await self._dispatch(event)
        return event

    async def _receive_loop(self) -> None:
        assert self.transport is not None
        try:
            async for frame in self.transport:
                await self.feed(frame)
        except asyncio.CancelledError:
            pass
        except ConnectionClosed as exc:
            logger.error("Receive loop terminated: %s", exc)
        except Exception:
            logger.exception("Receive loop crashed")
        finally:
            self.connected = False

    async def _dispatch(self, event: DecodedEvent) -> None:
        for name, future in list(self._waiters):
            if name == event.event_name and not future.done():
                future.set_result(event)

        handlers = self._handlers.get(event.event_name)
        if not handlers:
            logger.debug("No handler registered for %s", event.event_name)
            return
        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                logger.exception("Handler error for %s: %s", event.event_name, exc)
