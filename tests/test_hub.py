import asyncio
import uuid

from teamhub.realtime.hub import Connection, RealtimeHub, room_channel, team_channel

from helpers import FakeWebSocket


def _connection(team_id, user_id=None, fail=False):
    return Connection(FakeWebSocket(fail=fail), user_id or uuid.uuid4(), team_id)


def test_register_subscribes_team_channel():
    hub = RealtimeHub()
    team_id = uuid.uuid4()
    conn = _connection(team_id)

    hub.register(conn)

    assert hub.is_subscribed(conn, team_channel(team_id))
    assert hub.connections_of(conn.user_id) == [conn]


def test_emit_preserves_order_for_every_subscriber():
    hub = RealtimeHub()
    team_id = uuid.uuid4()
    first, second = _connection(team_id), _connection(team_id)
    hub.register(first)
    hub.register(second)

    async def scenario():
        await asyncio.gather(*(hub.emit(team_channel(team_id), "tick", {"n": n}) for n in range(5)))

    asyncio.run(scenario())

    first_seen = [f["data"]["n"] for f in first.websocket.frames]
    second_seen = [f["data"]["n"] for f in second.websocket.frames]
    assert len(first_seen) == 5
    assert first_seen == second_seen


def test_emit_excludes_connection_and_survives_failed_send():
    hub = RealtimeHub()
    team_id = uuid.uuid4()
    sender, broken, receiver = _connection(team_id), _connection(team_id, fail=True), _connection(team_id)
    for conn in (sender, broken, receiver):
        hub.register(conn)

    delivered = asyncio.run(hub.emit(team_channel(team_id), "hello", {"x": 1}, exclude=sender))

    assert delivered == 1
    assert sender.websocket.frames == []
    assert receiver.websocket.frames == [{"event": "hello", "data": {"x": 1}}]


def test_room_channels_are_isolated():
    hub = RealtimeHub()
    team_id = uuid.uuid4()
    inside, outside = _connection(team_id), _connection(team_id)
    hub.register(inside)
    hub.register(outside)
    room_id = uuid.uuid4()
    hub.subscribe(inside, room_channel(room_id))

    asyncio.run(hub.emit(room_channel(room_id), "newMessage", {"id": "m1"}))

    assert inside.websocket.events() == ["newMessage"]
    assert outside.websocket.events() == []


def test_unregister_drops_all_subscriptions():
    hub = RealtimeHub()
    team_id = uuid.uuid4()
    conn = _connection(team_id)
    hub.register(conn)
    room = room_channel(uuid.uuid4())
    hub.subscribe(conn, room)
    hub.subscribe(conn, room)

    hub.unregister(conn)

    assert hub.subscribers(room) == []
    assert hub.subscribers(team_channel(team_id)) == []
    assert hub.connections_of(conn.user_id) == []
    assert conn.channels == set()
