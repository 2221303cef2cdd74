"""
Chat DAO

Purpose
-------
Data-access layer for the chat entities:
- `ChatRoom`: create, fetch by id, list by team
- `ChatRoomMember`: create, fetch one membership, check the add permission
- `Message`: create, fetch by id, list by room (newest first), latest per room
- `MessageSeen`: create, fetch one receipt

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
- Uniqueness of (room, user) memberships and (message, user) receipts is
  enforced by the schema; duplicate inserts surface as `IntegrityError` at
  flush time and are left to the service layer.

Usage
-----
.. code-block:: python

    dao = ChatDao()
    room = dao.createChatRoom(session, ChatRoom(name="Dev", team_id=team_id))
    dao.createMember(session, ChatRoomMember(chat_room_id=room.id, user_id=user_id, can_add_members=True))
    messages = dao.fetchMessagesByRoomId(session, room.id)
"""

import logging
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from teamhub.database.entities.chat import ChatRoom, ChatRoomMember, Message, MessageSeen

logger = logging.getLogger(__name__)


class ChatDao:
    """
    Data Access Object (DAO) for chat rooms, memberships, messages and receipts.
    """

    def createChatRoom(self, session: Session, chat_room: ChatRoom) -> ChatRoom:
        """
        Stage a new chat room.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        chat_room : ChatRoom
            Room entity to insert.

        Returns
        -------
        ChatRoom
            The flushed room.

        Raises
        ------
        Exception
            If the insert fails.
        """
        try:
            session.add(chat_room)
            session.flush()
            return chat_room
        except Exception as e:
            logger.error("Error in ChatDao.createChatRoom. Error: %s", e)
            raise e

    def fetchChatRoomById(self, session: Session, chat_room_id: UUID) -> ChatRoom | None:
        return session.get(ChatRoom, chat_room_id)

    def fetchChatRoomsByTeamId(self, session: Session, team_id: UUID) -> list[ChatRoom]:
        return (
            session.query(ChatRoom)
            .filter(ChatRoom.team_id == team_id)
            .order_by(ChatRoom.created_at)
            .all()
        )

    def createMember(self, session: Session, member: ChatRoomMember) -> ChatRoomMember:
        """
        Stage a membership row.

        Raises
        ------
        sqlalchemy.exc.IntegrityError
            If the user already belongs to the room.
        """
        try:
            session.add(member)
            session.flush()
            return member
        except Exception as e:
            logger.error("Error in ChatDao.createMember. Error: %s", e)
            raise e

    def fetchMember(self, session: Session, chat_room_id: UUID, user_id: UUID) -> ChatRoomMember | None:
        return (
            session.query(ChatRoomMember)
            .filter(ChatRoomMember.chat_room_id == chat_room_id, ChatRoomMember.user_id == user_id)
            .one_or_none()
        )

    def fetchMemberWithAddPermission(self, session: Session, chat_room_id: UUID, user_id: UUID) -> ChatRoomMember | None:
        return (
            session.query(ChatRoomMember)
            .filter(
                ChatRoomMember.chat_room_id == chat_room_id,
                ChatRoomMember.user_id == user_id,
                ChatRoomMember.can_add_members.is_(True),
            )
            .one_or_none()
        )

    def createMessage(self, session: Session, message: Message) -> Message:
        try:
            session.add(message)
            session.flush()
            return message
        except Exception as e:
            logger.error("Error in ChatDao.createMessage. Error: %s", e)
            raise e

    def fetchMessageById(self, session: Session, message_id: UUID) -> Message | None:
        return session.get(Message, message_id)

    def fetchMessagesByRoomId(self, session: Session, chat_room_id: UUID) -> list[Message]:
        """
        Fetch all messages of a room, newest first.

        Returns
        -------
        list[Message]
            Messages ordered by descending creation time.
        """
        try:
            return (
                session.query(Message)
                .filter(Message.chat_room_id == chat_room_id)
                .order_by(desc(Message.created_at))
                .all()
            )
        except Exception as e:
            logger.error("Error in ChatDao.fetchMessagesByRoomId. Error: %s", e)
            raise e

    def fetchLatestMessage(self, session: Session, chat_room_id: UUID) -> Message | None:
        return (
            session.query(Message)
            .filter(Message.chat_room_id == chat_room_id)
            .order_by(desc(Message.created_at))
            .first()
        )

    def createMessageSeen(self, session: Session, seen: MessageSeen) -> MessageSeen:
        session.add(seen)
        session.flush()
        return seen

    def fetchMessageSeen(self, session: Session, message_id: UUID, user_id: UUID) -> MessageSeen | None:
        return (
            session.query(MessageSeen)
            .filter(MessageSeen.message_id == message_id, MessageSeen.user_id == user_id)
            .one_or_none()
        )
