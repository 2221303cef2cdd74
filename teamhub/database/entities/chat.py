"""
Chat ORM Models
===============

Team-scoped chat rooms and their messages.

- ``ChatRoom``: named room owned by one team
- ``ChatRoomMember``: membership join row with the flat ``can_add_members``
  permission; unique per (room, user)
- ``Message``: immutable message, text and/or image
- ``MessageSeen``: read receipt; unique per (message, user)

The unique constraints make "add member" and "mark seen" idempotent at the
data layer: a concurrent duplicate insert fails with ``IntegrityError``
instead of producing a second row.
"""

from teamhub.database.config.connection_engine import declarativeBase
from teamhub.database.helpers.timeutils import utcnow
from sqlalchemy import Boolean, ForeignKey, DateTime, TEXT, VARCHAR, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime


class ChatRoom(declarativeBase):
    """
    ORM model for the `chat_room` table.

    Attributes
    ----------
    id : UUID
        Primary key; the room's broadcast channel is ``chatroom_{id}``.
    name : str
        Room name.
    team_id : UUID
        Owning team. Every member belongs to this team.
    """

    __tablename__ = "chat_room"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("team.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    members = relationship("ChatRoomMember", back_populates="chat_room", order_by="ChatRoomMember.joined_at")


class ChatRoomMember(declarativeBase):
    __tablename__ = "chat_room_member"
    __table_args__ = (UniqueConstraint("chat_room_id", "user_id", name="uq_chat_room_member"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    chat_room_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("chat_room.id"), nullable=False, index=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False, index=True)
    can_add_members: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    chat_room = relationship("ChatRoom", back_populates="members")
    user = relationship("User")


class Message(declarativeBase):
    """
    ORM model for the `chat_message` table.

    Attributes
    ----------
    content : str | None
        Text of the message; None for image-only messages.
    image_url, image_key : str | None
        Public URL and storage key of an attached image.
    chat_room_id : UUID
        Room the message was sent to.
    sender_id : UUID
        Author.
    created_at : datetime
        Insert time; message lists are ordered on it, newest first.
    """

    __tablename__ = "chat_message"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    image_url: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    image_key: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    chat_room_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("chat_room.id"), nullable=False, index=True)
    sender_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    sender = relationship("User")
    seen_by = relationship("MessageSeen", back_populates="message", order_by="MessageSeen.seen_at")


class MessageSeen(declarativeBase):
    __tablename__ = "message_seen"
    __table_args__ = (UniqueConstraint("message_id", "user_id", name="uq_message_seen"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    message_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("chat_message.id"), nullable=False, index=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    message = relationship("Message", back_populates="seen_by")
    user = relationship("User")
