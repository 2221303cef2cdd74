import asyncio
import threading
from unittest.mock import patch

from teamhub.database.core import users
from teamhub.realtime.hub import Connection, RealtimeHub
from teamhub.realtime.presence import PresenceBroadcaster

from helpers import FakeWebSocket


def _connect(presence, user):
    conn = Connection(FakeWebSocket(), user.id, user.team_id)
    asyncio.run(presence.connect(conn))
    return conn


def test_first_connection_marks_user_online(leader, member):
    hub = RealtimeHub()
    presence = PresenceBroadcaster(hub)
    watcher = _connect(presence, leader)
    watcher.websocket.frames.clear()

    _connect(presence, member)

    assert users.get_user(user_id=member.id).is_online is True
    frame = watcher.websocket.frames[-1]
    assert frame["event"] == "userStatusChange"
    assert frame["data"]["userId"] == str(member.id)
    assert frame["data"]["isOnline"] is True


def test_second_connection_does_not_rebroadcast(leader, member):
    hub = RealtimeHub()
    presence = PresenceBroadcaster(hub)
    watcher = _connect(presence, leader)
    _connect(presence, member)
    watcher.websocket.frames.clear()

    _connect(presence, member)

    assert watcher.websocket.frames == []


def test_user_stays_online_until_last_connection_closes(leader, member):
    hub = RealtimeHub()
    presence = PresenceBroadcaster(hub)
    watcher = _connect(presence, leader)
    phone = _connect(presence, member)
    laptop = _connect(presence, member)
    watcher.websocket.frames.clear()

    asyncio.run(presence.disconnect(phone))
    assert users.get_user(user_id=member.id).is_online is True
    assert watcher.websocket.frames == []

    asyncio.run(presence.disconnect(laptop))
    stored = users.get_user(user_id=member.id)
    assert stored.is_online is False
    assert stored.last_seen is not None

    frame = watcher.websocket.frames[-1]
    assert frame["event"] == "userStatusChange"
    assert frame["data"]["isOnline"] is False
    assert frame["data"]["lastSeen"] is not None
    assert all(f["data"].get("isOnline") is not False for f in laptop.websocket.frames)
    assert hub.connections_of(member.id) == []


def test_reconnect_during_offline_write_ends_online(leader, member):
    hub = RealtimeHub()
    presence = PresenceBroadcaster(hub)
    watcher = _connect(presence, leader)
    old = _connect(presence, member)
    watcher.websocket.frames.clear()

    release = threading.Event()
    set_online_status = users.set_online_status

    def held_offline_write(**kwargs):
        if not kwargs["is_online"]:
            release.wait(5)
        return set_online_status(**kwargs)

    async def scenario():
        with patch.object(users, "set_online_status", side_effect=held_offline_write):
            closing = asyncio.create_task(presence.disconnect(old))
            await asyncio.sleep(0.05)
            new = Connection(FakeWebSocket(), member.id, member.team_id)
            opening = asyncio.create_task(presence.connect(new))
            await asyncio.sleep(0.05)
            release.set()
            await asyncio.gather(closing, opening)
        return new

    new = asyncio.run(scenario())

    assert hub.connections_of(member.id) == [new]
    assert users.get_user(user_id=member.id).is_online is True
    assert [f["data"]["isOnline"] for f in watcher.websocket.frames] == [False, True]
