"""
Chat routes (``/chats``).

Mutations go through `ChatFanout` so that the matching real-time event is
emitted after the write commits; reads call the service layer directly.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from teamhub.api.deps import ensure_same_team, get_chat, get_current_user
from teamhub.api.models import ChatRoomCreation, MemberAddition, MessageSeenRequest, NewMessage, UserRead
from teamhub.api.response import send_response
from teamhub.database.core import chat
from teamhub.realtime.fanout import ChatFanout

router = APIRouter(prefix="/chats", tags=["chat"])


@router.post("/rooms/create")
async def create_chat_room(
    data: ChatRoomCreation,
    user: UserRead = Depends(get_current_user),
    fanout: ChatFanout = Depends(get_chat),
):
    """Create a room in the caller's team with the caller as first member."""
    ensure_same_team(user, data.team_id)
    room = await fanout.create_chat_room(name=data.name, team_id=data.team_id, creator_id=user.id)
    return send_response(room, "Chat room created successfully", status.HTTP_201_CREATED)


@router.get("/rooms/{team_id}")
def list_chat_rooms(team_id: UUID, user: UserRead = Depends(get_current_user)):
    ensure_same_team(user, team_id)
    return send_response(chat.get_chat_rooms(team_id=team_id), "Chat rooms retrieved successfully")


@router.post("/rooms/members/add")
async def add_member(
    data: MemberAddition,
    user: UserRead = Depends(get_current_user),
    fanout: ChatFanout = Depends(get_chat),
):
    member = await fanout.add_member(chat_room_id=data.chat_room_id, user_id=data.user_id, added_by_user_id=user.id)
    return send_response(member, "Member added successfully")


@router.get("/messages/{chat_room_id}")
def list_messages(chat_room_id: UUID, user: UserRead = Depends(get_current_user)):
    """Messages of a room, newest first. Members only."""
    messages = chat.get_chat_room_messages(chat_room_id=chat_room_id, user_id=user.id)
    return send_response(messages, "Messages retrieved successfully")


@router.post("/messages/send")
async def send_message(
    data: NewMessage,
    user: UserRead = Depends(get_current_user),
    fanout: ChatFanout = Depends(get_chat),
):
    message = await fanout.send_message(
        chat_room_id=data.chat_room_id, sender_id=user.id, content=data.content, image_file=data.image_file
    )
    return send_response(message, "Message sent successfully", status.HTTP_201_CREATED)


@router.post("/messages/seen")
async def mark_message_seen(
    data: MessageSeenRequest,
    user: UserRead = Depends(get_current_user),
    fanout: ChatFanout = Depends(get_chat),
):
    seen = await fanout.mark_seen(message_id=data.message_id, user_id=user.id)
    return send_response(seen, "Message marked as seen")


@router.get("/online-users/{team_id}")
def online_users(team_id: UUID, user: UserRead = Depends(get_current_user)):
    ensure_same_team(user, team_id)
    return send_response(chat.get_online_users(team_id=team_id), "Online users retrieved successfully")
