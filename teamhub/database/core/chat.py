"""
Service-layer operations for chat rooms, memberships, messages and receipts.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically; call them with keyword
arguments only. They return Pydantic read models built while the session is
open, so the caller (REST handler or the real-time fan-out) can serialize
them after the transaction has committed.

Nothing here broadcasts: `teamhub.realtime.fanout.ChatFanout` emits events
after these functions return successfully.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from teamhub.api.errors import BadRequest, Forbidden, NotFound
from teamhub.api.models import ChatRoomMemberRead, ChatRoomRead, MessageRead, MessageSeenRead, OnlineUser
from teamhub.database.daos.chat_dao import ChatDao
from teamhub.database.daos.team_dao import TeamDao
from teamhub.database.daos.user_dao import UserDao
from teamhub.database.entities.chat import ChatRoom, ChatRoomMember, Message, MessageSeen
from teamhub.database.helpers.transactionManagement import transactional


@transactional
def create_chat_room(session: Session, name: str, team_id: UUID, creator_id: UUID) -> ChatRoomRead:
    """
    Create a room and make its creator the first member.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    name : str
        Room name.
    team_id : UUID
        Owning team.
    creator_id : UUID
        User creating the room; added with `can_add_members=True`.

    Returns
    -------
    ChatRoomRead
        The room with its single member expanded.

    Raises
    ------
    NotFound
        If the team or the creator does not exist.
    """
    if TeamDao().fetchTeamById(session, team_id) is None:
        raise NotFound("Team not found")
    if UserDao().fetchUserById(session, creator_id) is None:
        raise NotFound("User not found")

    chat_dao = ChatDao()
    room = chat_dao.createChatRoom(session, ChatRoom(name=name, team_id=team_id))
    chat_dao.createMember(
        session,
        ChatRoomMember(chat_room_id=room.id, user_id=creator_id, can_add_members=True),
    )
    session.refresh(room)
    return ChatRoomRead.model_validate(room)


@transactional
def get_chat_rooms(session: Session, team_id: UUID) -> list[ChatRoomRead]:
    """
    List the rooms of a team with members and the latest message expanded.
    """
    chat_dao = ChatDao()
    rooms = []
    for room in chat_dao.fetchChatRoomsByTeamId(session, team_id):
        read = ChatRoomRead.model_validate(room)
        latest = chat_dao.fetchLatestMessage(session, room.id)
        if latest is not None:
            read.latest_message = MessageRead.model_validate(latest)
        rooms.append(read)
    return rooms


@transactional
def add_member_to_chat_room(
    session: Session, chat_room_id: UUID, user_id: UUID, added_by_user_id: UUID
) -> tuple[ChatRoomMemberRead, bool]:
    """
    Add a user to a room on behalf of an existing member.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    chat_room_id : UUID
        Target room.
    user_id : UUID
        User to add. Must belong to the room's team.
    added_by_user_id : UUID
        Member performing the addition; needs `can_add_members`.

    Returns
    -------
    tuple[ChatRoomMemberRead, bool]
        The membership and whether it was created by this call. Adding an
        existing member returns the existing row and ``False``.

    Raises
    ------
    Forbidden
        If the adder has no membership with `can_add_members` in the room.
    NotFound
        If the room or the user does not exist.
    BadRequest
        If the user belongs to another team.
    """
    chat_dao = ChatDao()
    room = chat_dao.fetchChatRoomById(session, chat_room_id)
    if room is None:
        raise NotFound("Chat room not found")

    if chat_dao.fetchMemberWithAddPermission(session, chat_room_id, added_by_user_id) is None:
        raise Forbidden("You do not have permission to add members")

    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.team_id != room.team_id:
        raise BadRequest("User does not belong to the chat room's team")

    existing = chat_dao.fetchMember(session, chat_room_id, user_id)
    if existing is not None:
        return ChatRoomMemberRead.model_validate(existing), False

    member = chat_dao.createMember(
        session,
        ChatRoomMember(chat_room_id=chat_room_id, user_id=user_id, can_add_members=True),
    )
    return ChatRoomMemberRead.model_validate(member), True


@transactional
def get_member(session: Session, chat_room_id: UUID, user_id: UUID) -> ChatRoomMemberRead:
    member = ChatDao().fetchMember(session, chat_room_id, user_id)
    if member is None:
        raise NotFound("Chat room membership not found")
    return ChatRoomMemberRead.model_validate(member)


@transactional
def is_member(session: Session, chat_room_id: UUID, user_id: UUID) -> bool:
    return ChatDao().fetchMember(session, chat_room_id, user_id) is not None


@transactional
def get_chat_room_messages(session: Session, chat_room_id: UUID, user_id: UUID) -> list[MessageRead]:
    """
    List the messages of a room, newest first, with sender and receipts.
    Only members of the room may read it.

    Raises
    ------
    NotFound
        If the room does not exist.
    Forbidden
        If `user_id` is not a member of the room.
    """
    chat_dao = ChatDao()
    if chat_dao.fetchChatRoomById(session, chat_room_id) is None:
        raise NotFound("Chat room not found")
    if chat_dao.fetchMember(session, chat_room_id, user_id) is None:
        raise Forbidden("You are not a member of this chat room")
    return [MessageRead.model_validate(m) for m in chat_dao.fetchMessagesByRoomId(session, chat_room_id)]


@transactional
def create_message(
    session: Session,
    chat_room_id: UUID,
    sender_id: UUID,
    content: str | None = None,
    image_url: str | None = None,
    image_key: str | None = None,
) -> MessageRead:
    """
    Insert a message. Any image has already been uploaded by the caller.

    Raises
    ------
    BadRequest
        If the message has neither text nor image.
    NotFound
        If the room does not exist.
    Forbidden
        If the sender is not a member of the room.
    """
    if not (content and content.strip()) and not image_url:
        raise BadRequest("A message needs content or an image")

    chat_dao = ChatDao()
    if chat_dao.fetchChatRoomById(session, chat_room_id) is None:
        raise NotFound("Chat room not found")
    if chat_dao.fetchMember(session, chat_room_id, sender_id) is None:
        raise Forbidden("You are not a member of this chat room")

    message = chat_dao.createMessage(
        session,
        Message(
            content=content,
            image_url=image_url,
            image_key=image_key,
            chat_room_id=chat_room_id,
            sender_id=sender_id,
        ),
    )
    session.refresh(message)
    return MessageRead.model_validate(message)


@transactional
def mark_message_as_seen(session: Session, message_id: UUID, user_id: UUID) -> tuple[MessageSeenRead, bool]:
    """
    Record that a user has seen a message.

    Returns
    -------
    tuple[MessageSeenRead, bool]
        The receipt and whether it was created by this call. A repeated call
        returns the existing receipt and ``False``.

    Raises
    ------
    NotFound
        If the message or the user does not exist.
    Forbidden
        If the user is not a member of the message's room.
    """
    chat_dao = ChatDao()
    message = chat_dao.fetchMessageById(session, message_id)
    if message is None:
        raise NotFound("Message not found")
    if UserDao().fetchUserById(session, user_id) is None:
        raise NotFound("User not found")
    if chat_dao.fetchMember(session, message.chat_room_id, user_id) is None:
        raise Forbidden("You are not a member of this chat room")

    existing = chat_dao.fetchMessageSeen(session, message_id, user_id)
    if existing is not None:
        return MessageSeenRead.model_validate(existing), False

    seen = chat_dao.createMessageSeen(session, MessageSeen(message_id=message_id, user_id=user_id))
    return MessageSeenRead.model_validate(seen), True


@transactional
def get_message_seen(session: Session, message_id: UUID, user_id: UUID) -> MessageSeenRead:
    seen = ChatDao().fetchMessageSeen(session, message_id, user_id)
    if seen is None:
        raise NotFound("Seen receipt not found")
    return MessageSeenRead.model_validate(seen)


@transactional
def get_message_room_id(session: Session, message_id: UUID) -> UUID:
    """
    Return the room of a message. Raises NotFound if the message vanished
    between the receipt insert and this read.
    """
    message = ChatDao().fetchMessageById(session, message_id)
    if message is None:
        raise NotFound("Message not found")
    return message.chat_room_id


@transactional
def get_online_users(session: Session, team_id: UUID) -> list[OnlineUser]:
    return [OnlineUser.model_validate(u) for u in UserDao().fetchOnlineUsersByTeamId(session, team_id)]
