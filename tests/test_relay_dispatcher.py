import json

import pytest

from app.api.ws.connection.model.connection import Connection, ConnectionState
from tests.fakes import FakeWebSocket


async def seat(registry, room_id, *connections):
    for connection in connections:
        await registry.join(room_id, connection)
        connection.room_id = room_id
        connection.state = ConnectionState.IN_ROOM
        connection.start()


@pytest.mark.asyncio
async def test_relay_only_reaches_the_peer(registry, dispatcher, make_connection):
    a, b = make_connection(), make_connection()
    c, d = make_connection(), make_connection()
    await seat(registry, "r1", a, b)
    await seat(registry, "r2", c, d)

    frame = json.dumps({"type": "offer", "sdp": "v=0"})
    assert await dispatcher.relay(a, frame)
    for connection in (a, b, c, d):
        await connection.flush()

    assert b.websocket.sent == [frame]
    assert a.websocket.sent == []
    assert c.websocket.sent == []
    assert d.websocket.sent == []


@pytest.mark.asyncio
async def test_binary_frames_are_forwarded_byte_identical(registry, dispatcher, make_connection):
    a, b = make_connection(), make_connection()
    await seat(registry, "r1", a, b)
    payload = bytes(range(256)) * 64

    assert await dispatcher.relay(b, payload)
    await a.flush()

    assert a.websocket.sent == [payload]
    assert isinstance(a.websocket.sent[0], bytes)


@pytest.mark.asyncio
async def test_relay_without_peer_is_dropped(registry, dispatcher, make_connection):
    lonely, roomless = make_connection(), make_connection()
    await seat(registry, "r1", lonely)

    assert not await dispatcher.relay(lonely, '{"type": "offer"}')
    assert not await dispatcher.relay(roomless, '{"type": "offer"}')


@pytest.mark.asyncio
async def test_relay_skips_closed_peer(registry, dispatcher, make_connection):
    a, b = make_connection(), make_connection()
    await seat(registry, "r1", a, b)
    await b.close()

    assert not await dispatcher.relay(a, '{"type": "answer"}')
    assert b.websocket.sent == []


@pytest.mark.asyncio
async def test_relay_skips_saturated_peer(registry, dispatcher, make_connection):
    a = make_connection()
    b = Connection(FakeWebSocket(), queue_size=2)
    await registry.join("r1", a)
    await registry.join("r1", b)
    a.room_id = "r1"

    # b's writer is never started, so its queue fills up
    assert await dispatcher.relay(a, "one")
    assert await dispatcher.relay(a, "two")
    assert not b.is_writable
    assert not await dispatcher.relay(a, "three")


@pytest.mark.asyncio
async def test_notify_serializes_json(make_connection, dispatcher):
    connection = make_connection()
    connection.start()

    assert dispatcher.notify(connection, {"type": "full", "roomId": "abc"})
    await connection.flush()

    assert json.loads(connection.websocket.sent[0]) == {"type": "full", "roomId": "abc"}
