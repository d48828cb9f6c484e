from __future__ import annotations

import logging
from typing import Optional, Set

from client.core.network import SocketClient
from client.core.session import ClientSession
from shared.protocol.errors import ProtocolError
from shared.protocol.events import ChatEvent
from shared.protocol.messages import DecodedEvent, JoinRoomSuccessPayload

logger = logging.getLogger(__name__)

JOIN_LATENCY = "join_latency"


class RoomManager:
    def __init__(self, client: SocketClient, session: ClientSession) -> None:
        self.client = client
        self.session = session
        self.current_room: Optional[str] = None
        self.joined_rooms: Set[str] = set()
        client.on(ChatEvent.JOIN_ROOM_SUCCESS, self._handle_join_success)
        client.on(ChatEvent.JOIN_ROOM_ERROR, self._handle_join_error)

    async def join_room(self, room_id: str, wait: bool = False, timeout: Optional[float] = None) -> Optional[JoinRoomSuccessPayload]:
        self.session.start(("join", room_id))
        if not wait:
            await self.client.emit(ChatEvent.JOIN_ROOM, room_id)
            return None
        # Register before emitting: the reply may land while send() is still yielding.
        waiter = self.client.expect(ChatEvent.JOIN_ROOM_SUCCESS)
        try:
            await self.client.emit(ChatEvent.JOIN_ROOM, room_id)
        except Exception:
            self.client.discard(waiter)
            raise
        event = await self.client.wait_expected(waiter, timeout=timeout)
        return JoinRoomSuccessPayload.from_data(event.data)

    async def leave_room(self, room_id: str) -> None:
        await self.client.emit(ChatEvent.LEAVE_ROOM, room_id)
        self.joined_rooms.discard(room_id)
        if self.current_room == room_id:
            self.current_room = None
        self.session.increment("churn_cycles")
        logger.debug("Left room %s", room_id)

    async def _handle_join_success(self, event: DecodedEvent) -> None:
        try:
            payload = JoinRoomSuccessPayload.from_data(event.data)
        except ProtocolError as exc:
            logger.warning("Unexpected joinRoomSuccess payload: %s", exc)
            self.session.increment("join_errors")
            return
        latency = self.session.finish(("join", payload.room_id), JOIN_LATENCY)
        self.current_room = payload.room_id
        self.joined_rooms.add(payload.room_id)
        self.session.increment("rooms_joined")
        logger.debug("Joined room %s (%s participants, %s ms)", payload.room_id, len(payload.participants), latency)

    async def _handle_join_error(self, event: DecodedEvent) -> None:
        self.session.increment("join_errors")
        logger.error("Join failed: %s", event.data)
