import asyncio
import logging

import pytest
import websockets

from conftest import ScriptedWebSocket

from client.core.network import NetworkError, SocketClient
from shared.protocol import ChatEvent, MalformedPacketError, ProtocolError


def _client(config, transport, diagnostics=None):
    client = SocketClient(config, diagnostics=diagnostics)
    client.attach(transport)
    return client


def test_emit_writes_event_frame(client_config, async_transport):
    client = _client(client_config, async_transport)

    frame = asyncio.run(client.emit(ChatEvent.JOIN_ROOM, "507f1f77bcf86cd799439011"))

    assert frame == '42["joinRoom","507f1f77bcf86cd799439011"]'
    assert async_transport.sent == [frame]


def test_emit_validates_before_sending(client_config, async_transport):
    client = _client(client_config, async_transport)

    with pytest.raises(ProtocolError):
        asyncio.run(client.emit(ChatEvent.CHAT_MESSAGE, {"room": "r1"}))
    assert async_transport.sent == []


def test_emit_without_validation(client_config, async_transport):
    client_config["validate_payloads"] = False
    client = _client(client_config, async_transport)

    asyncio.run(client.emit(ChatEvent.CHAT_MESSAGE, {"room": "r1"}))
    assert async_transport.sent == ['42["chatMessage",{"room":"r1"}]']


def test_listen_answers_ping_and_reports_malformed(client_config, async_transport):
    reported = []
    client = _client(client_config, async_transport, diagnostics=reported.append)

    async def scenario():
        results = []
        for frame in ("2", "42{not valid json", '42["joinRoomSuccess",{"roomId":"r1"}]', "40"):
            results.append(await client.listen(frame))
        return results

    heartbeat, malformed, event, ignored = asyncio.run(scenario())

    assert heartbeat is None and malformed is None and ignored is None
    assert event.event_name == "joinRoomSuccess"
    assert async_transport.sent == ["3"]
    assert client.malformed_frames == 1
    assert len(reported) == 1
    assert isinstance(reported[0], MalformedPacketError)
    assert reported[0].frame == "42{not valid json"


def test_handlers_dispatch_in_order_and_survive_failures(client_config, async_transport):
    client = _client(client_config, async_transport)
    seen = []

    async def broken(event):
        raise RuntimeError("handler bug")

    async def record(event):
        seen.append(event.data["content"])

    client.on("message", broken)
    client.on("message", record)

    async def scenario():
        for frame in ('42["message",{"content":"a"}]', "2", '42["message",{"content":"b"}]'):
            await client.feed(frame)

    asyncio.run(scenario())
    assert seen == ["a", "b"]
    assert async_transport.sent == ["3"]


def test_wait_for_resolves_on_matching_event(client_config, async_transport):
    client = _client(client_config, async_transport)

    async def scenario():
        waiter = asyncio.ensure_future(client.wait_for(ChatEvent.PREVIOUS_MESSAGES_LOADED))
        await asyncio.sleep(0)
        await client.feed('42["message",{"content":"noise"}]')
        await client.feed('42["previousMessagesLoaded",{"messages":[1],"hasMore":false}]')
        return await waiter

    event = asyncio.run(scenario())
    assert event.data == {"messages": [1], "hasMore": False}


def test_wait_for_times_out(client_config, async_transport):
    client = _client(client_config, async_transport)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(client.wait_for("joinRoomSuccess", timeout=0.01))


def test_close_closes_transport(client_config, async_transport):
    client = _client(client_config, async_transport)
    asyncio.run(client.close())

    assert async_transport.closed
    assert not client.connected


def test_connect_gives_up_after_retries(client_config):
    client = SocketClient(client_config)

    with pytest.raises(NetworkError):
        asyncio.run(client.connect())
    assert not client.connected


def test_connect_retries_then_joins_namespace_and_receives(client_config, monkeypatch):
    client_config["max_reconnect_retries"] = 1
    client = SocketClient(client_config)
    websocket = ScriptedWebSocket(['0{"sid":"abc"}', '40{"sid":"def"}', "2", '42["joinRoomSuccess",{"roomId":"r1"}]'])
    attempts = []
    seen = []

    async def fake_connect(url, **kwargs):
        attempts.append(url)
        if len(attempts) == 1:
            raise OSError("connection refused")
        return websocket

    async def record(event):
        seen.append(event.data)

    monkeypatch.setattr(websockets, "connect", fake_connect)
    client.on("joinRoomSuccess", record)

    async def scenario():
        await client.connect()
        event = await client.wait_for("joinRoomSuccess")
        await client.close()
        return event

    event = asyncio.run(scenario())
    assert len(attempts) == 2
    assert websocket.sent == ["40", "3"]
    assert event.data == {"roomId": "r1"}
    assert seen == [{"roomId": "r1"}]
    assert websocket.closed


def test_connect_does_not_sleep_after_last_attempt(client_config, monkeypatch):
    client_config["max_reconnect_retries"] = 2
    client = SocketClient(client_config)
    sleeps = []

    async def refuse(url, **kwargs):
        raise OSError("connection refused")

    async def fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr(websockets, "connect", refuse)
    monkeypatch.setattr("client.core.network.asyncio.sleep", fake_sleep)

    with pytest.raises(NetworkError):
        asyncio.run(client.connect())
    assert len(sleeps) == 2


def test_receive_loop_logs_transport_failure(client_config, caplog):
    class FailingWebSocket(ScriptedWebSocket):
        async def send(self, text):
            raise OSError("broken pipe")

    client = _client(client_config, FailingWebSocket(["2"]))

    async def scenario():
        task = asyncio.ensure_future(client._receive_loop())
        await task
        return task

    with caplog.at_level(logging.ERROR, logger="client.core.network"):
        task = asyncio.run(scenario())

    assert task.exception() is None
    assert not client.connected
    assert any("Receive loop crashed" in record.getMessage() for record in caplog.records)


def test_close_waits_for_receive_loop(client_config):
    client = _client(client_config, ScriptedWebSocket())

    async def scenario():
        task = asyncio.ensure_future(client._receive_loop())
        client._receive_task = task
        await asyncio.sleep(0)
        await client.close()
        return task

    task = asyncio.run(scenario())
    assert task.done()
    assert client._receive_task is None


def test_wait_for_zero_timeout_is_not_the_default(client_config, async_transport):
    client_config["request_timeout"] = 30
    client = _client(client_config, async_transport)

    async def scenario():
        started = asyncio.get_running_loop().time()
        with pytest.raises(asyncio.TimeoutError):
            await client.wait_for("joinRoomSuccess", timeout=0)
        return asyncio.get_running_loop().time() - started

    assert asyncio.run(scenario()) < 5
