from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from client.core.network import SocketClient
from client.core.session import ClientSession
from shared.protocol.errors import ProtocolError
from shared.protocol.events import ChatEvent
from shared.protocol.messages import (
    ChatMessagePayload,
    DecodedEvent,
    FetchPreviousMessagesPayload,
    MarkMessagesAsReadPayload,
    MessageBroadcastPayload,
    MessageReactionPayload,
    PreviousMessagesLoadedPayload,
    ServerErrorPayload,
)
from shared.utils.common import epoch_millis

logger = logging.getLogger(__name__)

BROADCAST_LATENCY = "broadcast_latency"
FETCH_LATENCY = "fetch_latency"
FETCH_KEY = "fetchPreviousMessages"
READ_LATENCY = "read_latency"
READ_KEY = "markMessagesAsRead"
REACTION_LATENCY = "reaction_latency"
REACTION_KEY = "messageReaction"
LOAD_ERROR = "LOAD_ERROR"


class MessagingManager:
    """Messaging feature facade: chat messages, history paging, reads and reactions."""

    def __init__(self, client: SocketClient, session: ClientSession) -> None:
        self.client = client
        self.session = session
        self.last_history: Optional[PreviousMessagesLoadedPayload] = None
        self._incoming_queue: asyncio.Queue[MessageBroadcastPayload] = asyncio.Queue()
        client.on(ChatEvent.MESSAGE, self._handle_message)
        client.on(ChatEvent.MESSAGE_LOAD_START, self._handle_load_start)
        client.on(ChatEvent.PREVIOUS_MESSAGES_LOADED, self._handle_history)
        client.on(ChatEvent.MESSAGES_READ, self._handle_read_update)
        client.on(ChatEvent.MESSAGE_REACTION_UPDATE, self._handle_reaction_update)
        client.on(ChatEvent.ERROR, self._handle_error)

    async def send_chat_message(self, room_id: str, content: str, type: str = "text") -> None:
        payload = ChatMessagePayload(room=room_id, type=type, content=content)
        await self.client.emit(ChatEvent.CHAT_MESSAGE, payload.to_data())
        self.session.increment("messages_sent")

    async def fetch_previous_messages(self, room_id: str, limit: int = 30, before: Optional[int] = None) -> None:
        payload = FetchPreviousMessagesPayload(room_id=room_id, limit=limit, before=before)
        self.session.start(FETCH_KEY)
        await self.client.emit(ChatEvent.FETCH_PREVIOUS_MESSAGES, payload.to_data())

    async def mark_messages_as_read(self, room_id: str, message_ids: List[str]) -> None:
        payload = MarkMessagesAsReadPayload(room_id=room_id, message_ids=message_ids)
        self.session.start(READ_KEY)
        await self.client.emit(ChatEvent.MARK_MESSAGES_AS_READ, payload.to_data())
        self.session.increment("interactions_sent")

    async def react(self, message_id: str, reaction: str, type: str = "add") -> None:
        payload = MessageReactionPayload(message_id=message_id, reaction=reaction, type=type)
        self.session.start(REACTION_KEY)
        await self.client.emit(ChatEvent.MESSAGE_REACTION, payload.to_data())
        self.session.increment("interactions_sent")

    async def next_message(self, timeout: Optional[float] = None) -> Optional[MessageBroadcastPayload]:
        try:
            return await asyncio.wait_for(self._incoming_queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    async def _handle_message(self, event: DecodedEvent) -> None:
        try:
            message = MessageBroadcastPayload.from_data(event.data)
        except ProtocolError as exc:
            logger.warning("Unexpected message payload: %s", exc)
            return
        if message.timestamp is not None:
            latency = epoch_millis() - message.timestamp
            self.session.record(BROADCAST_LATENCY, latency)
            logger.debug("Message received latency: %sms", latency)
        self.session.increment("messages_received")
        await self._incoming_queue.put(message)

    async def _handle_load_start(self, event: DecodedEvent) -> None:
        # The server has started its query; time from here.
        self.session.start(FETCH_KEY)
        logger.debug("Message load started")

    async def _handle_history(self, event: DecodedEvent) -> None:
        try:
            history = PreviousMessagesLoadedPayload.from_data(event.data)
        except ProtocolError as exc:
            logger.warning("Unexpected previousMessagesLoaded payload: %s", exc)
            self.session.increment("fetch_errors")
            return
        latency = self.session.finish(FETCH_KEY, FETCH_LATENCY)
        self.last_history = history
        self.session.increment("fetches_completed")
        logger.debug("Fetch success latency: %sms, messages: %s", latency, len(history.messages))

    async def _handle_read_update(self, event: DecodedEvent) -> None:
        # Also fires for other clients' reads; the first one after our request closes the timer.
        self.session.finish(READ_KEY, READ_LATENCY)
        self.session.increment("interaction_updates")

    async def _handle_reaction_update(self, event: DecodedEvent) -> None:
        self.session.finish(REACTION_KEY, REACTION_LATENCY)
        self.session.increment("interaction_updates")

    async def _handle_error(self, event: DecodedEvent) -> None:
        try:
            error = ServerErrorPayload.from_data(event.data if isinstance(event.data, dict) else {"message": event.data})
        except ProtocolError:
            error = ServerErrorPayload()
        if error.code == LOAD_ERROR:
            self.session.increment("fetch_errors")
        self.session.increment("server_errors")
