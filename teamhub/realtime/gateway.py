"""
WebSocket gateway (``/ws``).

Auth
----
The bearer token is read from the ``token`` query parameter or from an
``Authorization: Bearer`` header. It is verified before the socket is
accepted; an invalid token, or one whose user no longer exists, closes the
handshake with code 1008 (policy violation) and touches no state.

Protocol
--------
Frames are JSON ``{"event": <name>, "data": <payload>}`` in both directions.

Client → server:
    joinChatRoom     ``{"chatRoomId"}`` or a bare id  (member rooms only)
    leaveChatRoom    ``{"chatRoomId"}`` or a bare id
    sendMessage      ``{"chatRoomId", "content"?, "imageFile"?}``
    markMessageSeen  ``{"messageId"}`` or a bare id

Errors raised while handling an event are reported to the sending connection
only, as an ``error`` event; the connection stays open.
"""

import json
import logging
from uuid import UUID

from fastapi import WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from teamhub.api.errors import ApiError, BadRequest, Forbidden
from teamhub.api.models import NewMessage
from teamhub.api.utils import verify_token
from teamhub.database.core import chat, users
from teamhub.realtime.hub import Connection, room_channel

logger = logging.getLogger(__name__)

ERROR = "error"


def _extract_token(websocket: WebSocket) -> str | None:
    token = websocket.query_params.get("token")
    if token:
        return token
    authorization = websocket.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def _event_id(data, key: str) -> UUID:
    """Read an id sent either bare or as ``{key: id}``."""
    raw = data.get(key) if isinstance(data, dict) else data
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise BadRequest(f"{key} is required") from e


async def _authenticate(websocket: WebSocket) -> tuple[UUID, UUID] | None:
    token = _extract_token(websocket)
    claims = verify_token(token) if token else None
    if claims is None:
        return None
    try:
        user_id, team_id = UUID(str(claims["userId"])), UUID(str(claims["teamId"]))
    except ValueError:
        return None
    try:
        await run_in_threadpool(users.get_user, user_id=user_id)
    except ApiError:
        return None
    return user_id, team_id


async def handle_event(connection: Connection, event: str, data, hub, fanout) -> None:
    """Dispatch one client event. Raises on failure; the caller reports it."""
    if event == "joinChatRoom":
        chat_room_id = _event_id(data, "chatRoomId")
        if not await run_in_threadpool(chat.is_member, chat_room_id=chat_room_id, user_id=connection.user_id):
            raise Forbidden("You are not a member of this chat room")
        hub.subscribe(connection, room_channel(chat_room_id))
    elif event == "leaveChatRoom":
        hub.unsubscribe(connection, room_channel(_event_id(data, "chatRoomId")))
    elif event == "sendMessage":
        request = NewMessage.model_validate(data or {})
        await fanout.send_message(
            chat_room_id=request.chat_room_id,
            sender_id=connection.user_id,
            content=request.content,
            image_file=request.image_file,
        )
    elif event == "markMessageSeen":
        await fanout.mark_seen(message_id=_event_id(data, "messageId"), user_id=connection.user_id)
    else:
        raise BadRequest(f"Unknown event: {event}")


async def websocket_endpoint(websocket: WebSocket):
    """
    Authenticate, register presence, then process client events until the
    socket closes. Presence is released on every exit path.
    """
    identity = await _authenticate(websocket)
    if identity is None:
        logger.info("chat.ws.rejected client=%s", websocket.client)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    state = websocket.app.state
    hub, presence, fanout = state.hub, state.presence, state.chat

    await websocket.accept()
    connection = Connection(websocket, *identity)
    try:
        await presence.connect(connection)
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
                if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
                    raise BadRequest("Frames must be objects with an event name")
                await handle_event(connection, frame["event"], frame.get("data"), hub, fanout)
            except json.JSONDecodeError:
                await hub.send(connection, ERROR, {"message": "Invalid JSON", "statusCode": 400})
            except ValidationError as e:
                await hub.send(connection, ERROR, {"message": str(e.errors()[0]["msg"]), "statusCode": 400})
            except ApiError as e:
                await hub.send(connection, ERROR, {"message": e.message, "statusCode": e.status_code})
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception("chat.ws.event_failed conn=%s", connection.id)
                await hub.send(connection, ERROR, {"message": "Something went wrong", "statusCode": 500})
    except WebSocketDisconnect:
        pass
    finally:
        await presence.disconnect(connection)
