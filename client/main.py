from __future__ import annotations

import asyncio
import logging

from client.config import CLIENT_CONFIG, load_config
from client.core import ClientSession, SocketClient
from client.features import MessagingManager, RoomManager

logger = logging.getLogger(__name__)


async def run_client(hold_seconds: float = 5.0) -> ClientSession:
    """Open one connection, join the configured room and stay connected for a while."""
    load_config()
    logging.basicConfig(level=CLIENT_CONFIG["log_level"])
    client = SocketClient()
    session = ClientSession()
    rooms = RoomManager(client, session)
    MessagingManager(client, session)

    await client.connect()
    try:
        room = await rooms.join_room(CLIENT_CONFIG["test_room_id"], wait=True)
        logger.info("Joined room %s with %s participants", room.room_id, len(room.participants))
        await asyncio.sleep(hold_seconds)
    finally:
        await client.close()
    logger.info(
        "join p95=%s ms, malformed frames=%s, server errors=%s",
        session.percentile("join_latency", 95),
        client.malformed_frames,
        session.counter("server_errors"),
    )
    return session


if __name__ == "__main__":
    asyncio.run(run_client())
