"""
Chat fan-out: persist first, broadcast second.

`ChatFanout` is the single entry point for chat mutations that have live
subscribers. Both the REST routes and the WebSocket gateway call it. Each
method runs the blocking `@transactional` service call in the threadpool and
emits the real-time event only once that call has returned, so a failed
write never produces an event.

Events
------
- ``newChatRoom``  → ``team_{teamId}``      room with members expanded
- ``newMember``    → ``chatroom_{roomId}``  membership with user expanded
- ``newMessage``   → ``chatroom_{roomId}``  message with sender expanded
- ``messageSeen``  → ``chatroom_{roomId}``  seen receipt
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from teamhub.api.aws_bucket_funcs.funcs import CHAT_IMAGES_FOLDER
from teamhub.api.errors import BadRequest, Forbidden
from teamhub.api.models import ChatRoomMemberRead, ChatRoomRead, MessageRead, MessageSeenRead
from teamhub.database.core import chat
from teamhub.realtime.hub import RealtimeHub, room_channel, team_channel

logger = logging.getLogger(__name__)

NEW_CHAT_ROOM = "newChatRoom"
NEW_MEMBER = "newMember"
NEW_MESSAGE = "newMessage"
MESSAGE_SEEN = "messageSeen"


class ChatFanout:
    """
    Parameters
    ----------
    hub : RealtimeHub
        Registry used for broadcasting.
    uploader
        Object exposing ``upload(image_file, folder) -> {"url", "key"}`` and
        ``delete(key)``; `SpacesUploader` in production.
    """

    def __init__(self, hub: RealtimeHub, uploader):
        self.hub = hub
        self.uploader = uploader

    async def create_chat_room(self, name: str, team_id: UUID, creator_id: UUID) -> ChatRoomRead:
        room = await run_in_threadpool(chat.create_chat_room, name=name, team_id=team_id, creator_id=creator_id)
        logger.info("chat.room_created room=%s team=%s", room.id, team_id)
        await self.hub.emit(team_channel(team_id), NEW_CHAT_ROOM, room.to_payload())
        return room

    async def add_member(self, chat_room_id: UUID, user_id: UUID, added_by_user_id: UUID) -> ChatRoomMemberRead:
        """
        Add a member and announce it to the room. Re-adding an existing member
        returns the existing row without a broadcast.
        """
        try:
            member, created = await run_in_threadpool(
                chat.add_member_to_chat_room,
                chat_room_id=chat_room_id,
                user_id=user_id,
                added_by_user_id=added_by_user_id,
            )
        except IntegrityError:
            # a concurrent request inserted the same pair first
            member = await run_in_threadpool(chat.get_member, chat_room_id=chat_room_id, user_id=user_id)
            created = False

        if created:
            await self.hub.emit(room_channel(chat_room_id), NEW_MEMBER, member.to_payload())
        return member

    async def send_message(
        self, chat_room_id: UUID, sender_id: UUID, content: str | None = None, image_file: str | None = None
    ) -> MessageRead:
        """
        Store a message and broadcast it to the room.

        An attached image is uploaded to the ``chat-images`` folder before the
        message row is written; the message then carries its URL and key.

        Raises
        ------
        BadRequest
            If neither text nor image is given.
        Forbidden
            If the sender is not a member of the room.
        UploadFailed
            If the image upload fails; nothing is stored.

        When the insert fails after a successful upload the uploaded object
        is deleted again before the error propagates.
        """
        if not (content and content.strip()) and not image_file:
            raise BadRequest("A message needs content or an image")
        if not await run_in_threadpool(chat.is_member, chat_room_id=chat_room_id, user_id=sender_id):
            raise Forbidden("You are not a member of this chat room")

        image_url = image_key = None
        if image_file:
            uploaded = await run_in_threadpool(self.uploader.upload, image_file, CHAT_IMAGES_FOLDER)
            image_url, image_key = uploaded["url"], uploaded["key"]

        try:
            message = await run_in_threadpool(
                chat.create_message,
                chat_room_id=chat_room_id,
                sender_id=sender_id,
                content=content,
                image_url=image_url,
                image_key=image_key,
            )
        except Exception:
            if image_key is not None:
                await self._discard_image(image_key)
            raise
        await self.hub.emit(room_channel(chat_room_id), NEW_MESSAGE, message.to_payload())
        return message

    async def _discard_image(self, image_key: str) -> None:
        try:
            await run_in_threadpool(self.uploader.delete, image_key)
        except Exception:
            logger.exception("chat.image_cleanup_failed key=%s", image_key)
        else:
            logger.info("chat.image_discarded key=%s", image_key)

    async def mark_seen(self, message_id: UUID, user_id: UUID) -> MessageSeenRead:
        """
        Record a seen receipt and announce it to the message's room. Repeated
        calls return the existing receipt and do not broadcast again.
        """
        try:
            seen, created = await run_in_threadpool(chat.mark_message_as_seen, message_id=message_id, user_id=user_id)
        except IntegrityError:
            seen = await run_in_threadpool(chat.get_message_seen, message_id=message_id, user_id=user_id)
            created = False

        if created:
            chat_room_id = await run_in_threadpool(chat.get_message_room_id, message_id=message_id)
            await self.hub.emit(room_channel(chat_room_id), MESSAGE_SEEN, seen.to_payload())
        return seen
