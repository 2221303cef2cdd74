import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from teamhub.api.errors import BadRequest, Forbidden, NotFound, UploadFailed
from teamhub.database.core import chat
from teamhub.realtime.fanout import ChatFanout
from teamhub.realtime.hub import room_channel, team_channel

from helpers import FakeUploader, RecordingHub


@pytest.fixture
def hub():
    return RecordingHub()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def fanout(hub, uploader):
    return ChatFanout(hub, uploader)


def _events(hub):
    return [(channel, event) for channel, event, _ in hub.emitted]


def test_create_room_broadcasts_to_team(fanout, hub, leader):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))

    assert _events(hub) == [(team_channel(leader.team_id), "newChatRoom")]
    payload = hub.emitted[0][2]
    assert payload["id"] == str(room.id)
    assert payload["members"][0]["user"]["email"] == leader.email


def test_add_member_broadcasts_once(fanout, hub, leader, member):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    hub.emitted.clear()

    first = asyncio.run(fanout.add_member(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id))
    again = asyncio.run(fanout.add_member(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id))

    assert first.id == again.id
    assert _events(hub) == [(room_channel(room.id), "newMember")]
    assert hub.emitted[0][2]["canAddMembers"] is True


def test_add_member_race_returns_existing_row(fanout, hub, leader, member):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    chat.add_member_to_chat_room(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id)
    hub.emitted.clear()

    duplicate = IntegrityError("INSERT INTO chat_room_member", {}, Exception("UNIQUE constraint failed"))
    with patch.object(chat, "add_member_to_chat_room", side_effect=duplicate):
        existing = asyncio.run(fanout.add_member(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id))

    assert existing.user_id == member.id
    assert hub.emitted == []


def test_failed_add_does_not_broadcast(fanout, hub, leader, member, third_member):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    hub.emitted.clear()

    with pytest.raises(Forbidden):
        asyncio.run(fanout.add_member(chat_room_id=room.id, user_id=third_member.id, added_by_user_id=member.id))
    assert hub.emitted == []


def test_send_message_uploads_image_before_storing(fanout, hub, uploader, leader):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    hub.emitted.clear()

    message = asyncio.run(
        fanout.send_message(chat_room_id=room.id, sender_id=leader.id, content="look", image_file="aGVsbG8=")
    )

    assert uploader.calls == [("aGVsbG8=", "chat-images")]
    assert message.image_url == "https://cdn.test/chat-images/1.jpg"
    assert message.image_key == "chat-images/1.jpg"
    assert _events(hub) == [(room_channel(room.id), "newMessage")]
    assert hub.emitted[0][2]["sender"]["name"] == "Lena"
    assert chat.get_chat_room_messages(chat_room_id=room.id, user_id=leader.id)[0].id == message.id


def test_send_message_validation(fanout, hub, uploader, leader, member):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    hub.emitted.clear()

    with pytest.raises(BadRequest):
        asyncio.run(fanout.send_message(chat_room_id=room.id, sender_id=leader.id))
    with pytest.raises(Forbidden):
        asyncio.run(fanout.send_message(chat_room_id=room.id, sender_id=member.id, image_file="aGVsbG8="))

    assert uploader.calls == []
    assert hub.emitted == []


def test_failed_upload_stores_nothing(hub, leader):
    fanout = ChatFanout(hub, FakeUploader(fail=True))
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    hub.emitted.clear()

    with pytest.raises(UploadFailed):
        asyncio.run(fanout.send_message(chat_room_id=room.id, sender_id=leader.id, image_file="aGVsbG8="))

    assert chat.get_chat_room_messages(chat_room_id=room.id, user_id=leader.id) == []
    assert hub.emitted == []


def test_failed_insert_removes_uploaded_image(fanout, hub, uploader, leader):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    hub.emitted.clear()

    with patch.object(chat, "create_message", side_effect=NotFound("Chat room not found")):
        with pytest.raises(NotFound):
            asyncio.run(fanout.send_message(chat_room_id=room.id, sender_id=leader.id, image_file="aGVsbG8="))

    assert uploader.deleted == ["chat-images/1.jpg"]
    assert hub.emitted == []


def test_failed_text_insert_deletes_nothing(fanout, uploader, leader):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))

    with patch.object(chat, "create_message", side_effect=NotFound("Chat room not found")):
        with pytest.raises(NotFound):
            asyncio.run(fanout.send_message(chat_room_id=room.id, sender_id=leader.id, content="hi"))

    assert uploader.deleted == []


def test_mark_seen_broadcasts_once_to_room(fanout, hub, leader, member):
    room = asyncio.run(fanout.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id))
    asyncio.run(fanout.add_member(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id))
    message = asyncio.run(fanout.send_message(chat_room_id=room.id, sender_id=leader.id, content="ping"))
    hub.emitted.clear()

    first = asyncio.run(fanout.mark_seen(message_id=message.id, user_id=member.id))
    second = asyncio.run(fanout.mark_seen(message_id=message.id, user_id=member.id))

    assert first.id == second.id
    assert _events(hub) == [(room_channel(room.id), "messageSeen")]
    assert hub.emitted[0][2]["messageId"] == str(message.id)
