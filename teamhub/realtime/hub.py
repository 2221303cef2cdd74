"""
Presence & Room Registry
========================

Process-local registry of live WebSocket connections and the broadcast
channels they subscribe to.

Channels
--------
- ``team_{teamId}``: every connection of a team; receives presence changes,
  new rooms and deadline alerts.
- ``chatroom_{roomId}``: connections that joined a room; receives messages,
  new members and seen receipts.

Frames
------
Every frame is a JSON text message ``{"event": <name>, "data": <payload>}``.

Ordering
--------
Emissions on one channel are serialized by a per-channel `asyncio.Lock`, so
all subscribers observe a channel's events in the same order. A subscriber
whose send fails is logged and skipped; the broadcast continues.

The registry is rebuilt from scratch on restart; clients reconnect.
"""

import asyncio
import json
import logging
import uuid
from collections import defaultdict
from uuid import UUID

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def team_channel(team_id) -> str:
    return f"team_{team_id}"


def room_channel(chat_room_id) -> str:
    return f"chatroom_{chat_room_id}"


class Connection:
    """
    One authenticated WebSocket, bound to the user and team from its token.

    Attributes
    ----------
    id : str
        Process-unique connection id.
    websocket : WebSocket
        The accepted socket.
    user_id, team_id : UUID
        Identity taken from the verified token.
    channels : set[str]
        Channels this connection is subscribed to.
    closing : bool
        Set once the socket has gone away and presence is releasing it.
    """

    def __init__(self, websocket: WebSocket, user_id: UUID, team_id: UUID):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self.user_id = user_id
        self.team_id = team_id
        self.channels: set[str] = set()
        self.closing = False
        self._send_lock = asyncio.Lock()

    async def send(self, event: str, data) -> None:
        frame = json.dumps({"event": event, "data": data})
        async with self._send_lock:
            await self.websocket.send_text(frame)

    def __repr__(self) -> str:
        return f"Connection(id={self.id}, user={self.user_id}, team={self.team_id})"


class RealtimeHub:
    """
    Registry of connections and channel subscriptions with ordered broadcast.

    One instance is created per application and stored on ``app.state.hub``;
    components that emit events receive it by injection.
    """

    def __init__(self):
        self._connections: dict[str, Connection] = {}
        self._channels: dict[str, set[str]] = defaultdict(set)
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # -- registry --------------------------------------------------------

    def register(self, connection: Connection) -> None:
        """Track a connection and subscribe it to its team channel."""
        self._connections[connection.id] = connection
        self.subscribe(connection, team_channel(connection.team_id))
        logger.info("chat.ws.connected conn=%s user=%s", connection.id, connection.user_id)

    def unregister(self, connection: Connection) -> None:
        """Drop a connection and every subscription it holds."""
        for channel in list(connection.channels):
            self.unsubscribe(connection, channel)
        self._connections.pop(connection.id, None)
        logger.info("chat.ws.disconnected conn=%s user=%s", connection.id, connection.user_id)

    def subscribe(self, connection: Connection, channel: str) -> None:
        self._channels[channel].add(connection.id)
        connection.channels.add(channel)

    def unsubscribe(self, connection: Connection, channel: str) -> None:
        subscribers = self._channels.get(channel)
        if subscribers is not None:
            subscribers.discard(connection.id)
            if not subscribers:
                del self._channels[channel]
                self._locks.pop(channel, None)
        connection.channels.discard(channel)

    def connections_of(self, user_id: UUID) -> list[Connection]:
        return [c for c in self._connections.values() if c.user_id == user_id]

    def subscribers(self, channel: str) -> list[Connection]:
        return [self._connections[cid] for cid in self._channels.get(channel, ()) if cid in self._connections]

    def is_subscribed(self, connection: Connection, channel: str) -> bool:
        return connection.id in self._channels.get(channel, ())

    # -- emission --------------------------------------------------------

    async def emit(self, channel: str, event: str, data, exclude: Connection | None = None) -> int:
        """
        Send an event to every subscriber of a channel.

        Parameters
        ----------
        channel : str
            Target channel.
        event : str
            Event name.
        data : Any
            JSON-serializable payload.
        exclude : Connection | None
            Connection that must not receive the event.

        Returns
        -------
        int
            Number of subscribers the event was delivered to.
        """
        delivered = 0
        async with self._locks[channel]:
            for connection in self.subscribers(channel):
                if exclude is not None and connection.id == exclude.id:
                    continue
                try:
                    await connection.send(event, data)
                    delivered += 1
                except Exception as e:
                    logger.warning(
                        "chat.ws.send_failed conn=%s channel=%s event=%s error=%s", connection.id, channel, event, e
                    )
        logger.debug("chat.ws.emit channel=%s event=%s delivered=%s", channel, event, delivered)
        return delivered

    async def send(self, connection: Connection, event: str, data) -> None:
        """Send an event to a single connection."""
        await connection.send(event, data)
