import uuid

import pytest

from teamhub.api.errors import BadRequest, Forbidden, NotFound
from teamhub.database.core import chat, users
from teamhub.database.entities.chat import MessageSeen
from teamhub.database.helpers.timeutils import utcnow
from teamhub.database.helpers.transactionManagement import SessionFactory


def test_dev_room_scenario(leader, member, third_member):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    assert len(room.members) == 1
    assert room.members[0].user_id == leader.id
    assert room.members[0].can_add_members is True

    added, created = chat.add_member_to_chat_room(
        chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id
    )
    assert created is True
    assert added.can_add_members is True

    rooms = chat.get_chat_rooms(team_id=leader.team_id)
    assert len(rooms[0].members) == 2
    assert all(m.can_add_members for m in rooms[0].members)

    _, created = chat.add_member_to_chat_room(
        chat_room_id=room.id, user_id=third_member.id, added_by_user_id=member.id
    )
    assert created is True


def test_create_room_for_missing_team(leader):
    with pytest.raises(NotFound):
        chat.create_chat_room(name="Ghost", team_id=uuid.uuid4(), creator_id=leader.id)


def test_add_member_requires_membership_of_adder(leader, member, third_member):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    with pytest.raises(Forbidden):
        chat.add_member_to_chat_room(chat_room_id=room.id, user_id=third_member.id, added_by_user_id=member.id)


def test_add_member_checks(leader, member, outsider):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    with pytest.raises(NotFound):
        chat.add_member_to_chat_room(chat_room_id=uuid.uuid4(), user_id=member.id, added_by_user_id=leader.id)
    with pytest.raises(NotFound):
        chat.add_member_to_chat_room(chat_room_id=room.id, user_id=uuid.uuid4(), added_by_user_id=leader.id)
    with pytest.raises(BadRequest):
        chat.add_member_to_chat_room(chat_room_id=room.id, user_id=outsider.id, added_by_user_id=leader.id)


def test_adding_existing_member_is_idempotent(leader, member):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    first, _ = chat.add_member_to_chat_room(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id)
    again, created = chat.add_member_to_chat_room(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id)

    assert created is False
    assert again.id == first.id
    assert len(chat.get_chat_rooms(team_id=leader.team_id)[0].members) == 2


def test_messages_are_listed_newest_first(leader, member):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    chat.add_member_to_chat_room(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id)

    chat.create_message(chat_room_id=room.id, sender_id=leader.id, content="hello")
    latest = chat.create_message(chat_room_id=room.id, sender_id=member.id, content="hi there")

    messages = chat.get_chat_room_messages(chat_room_id=room.id, user_id=leader.id)
    assert [m.content for m in messages] == ["hi there", "hello"]
    assert messages[0].id == latest.id
    assert messages[0].sender.name == "Marco"
    assert chat.get_chat_rooms(team_id=leader.team_id)[0].latest_message.id == latest.id


def test_message_requires_content_or_image(leader):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    with pytest.raises(BadRequest):
        chat.create_message(chat_room_id=room.id, sender_id=leader.id, content="   ")

    image_only = chat.create_message(
        chat_room_id=room.id, sender_id=leader.id, image_url="https://cdn.test/a.jpg", image_key="chat-images/a.jpg"
    )
    assert image_only.content is None
    assert image_only.image_key == "chat-images/a.jpg"


def test_non_member_cannot_send(leader, member):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    with pytest.raises(Forbidden):
        chat.create_message(chat_room_id=room.id, sender_id=member.id, content="let me in")


def test_mark_seen_twice_keeps_one_row(leader, member):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    chat.add_member_to_chat_room(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id)
    message = chat.create_message(chat_room_id=room.id, sender_id=leader.id, content="read me")

    first, created_first = chat.mark_message_as_seen(message_id=message.id, user_id=member.id)
    second, created_second = chat.mark_message_as_seen(message_id=message.id, user_id=member.id)

    assert created_first is True
    assert created_second is False
    assert first.id == second.id
    with SessionFactory() as session:
        assert session.query(MessageSeen).filter(MessageSeen.message_id == message.id).count() == 1

    listed = chat.get_chat_room_messages(chat_room_id=room.id, user_id=leader.id)
    assert [s.user_id for s in listed[0].seen_by] == [member.id]
    assert chat.get_message_room_id(message_id=message.id) == room.id


def test_mark_seen_unknown_message(member):
    with pytest.raises(NotFound):
        chat.mark_message_as_seen(message_id=uuid.uuid4(), user_id=member.id)


def test_room_history_is_for_members_only(leader, member, outsider):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    chat.create_message(chat_room_id=room.id, sender_id=leader.id, content="private")

    for reader in (member, outsider):
        with pytest.raises(Forbidden):
            chat.get_chat_room_messages(chat_room_id=room.id, user_id=reader.id)
    with pytest.raises(NotFound):
        chat.get_chat_room_messages(chat_room_id=uuid.uuid4(), user_id=leader.id)


def test_only_members_can_mark_seen(leader, member, outsider):
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    message = chat.create_message(chat_room_id=room.id, sender_id=leader.id, content="private")

    for reader in (member, outsider):
        with pytest.raises(Forbidden):
            chat.mark_message_as_seen(message_id=message.id, user_id=reader.id)
    with SessionFactory() as session:
        assert session.query(MessageSeen).filter(MessageSeen.message_id == message.id).count() == 0


def test_online_users(leader, member):
    users.set_online_status(user_id=member.id, is_online=True, last_seen=utcnow())
    online = chat.get_online_users(team_id=leader.team_id)
    assert [u.id for u in online] == [member.id]
