"""
Presence broadcast: keeps `User.is_online` / `User.last_seen` in step with
live connections and tells the team about every change.

A user counts as online while at least one of their connections is open. The
first connection flips the flag on; closing the last one flips it off.

Connects and disconnects of one user are serialized by a per-user lock. A
departing connection is flagged `closing` before the "last connection"
decision and stays registered until the offline change has been broadcast,
so a reconnect that lands while the offline write is running waits for it
and then counts as a first connection again.
"""

import asyncio
import logging
from collections import defaultdict

from starlette.concurrency import run_in_threadpool

from teamhub.database.core import users
from teamhub.database.helpers.timeutils import utcnow
from teamhub.realtime.hub import Connection, RealtimeHub, team_channel

logger = logging.getLogger(__name__)

USER_STATUS_CHANGE = "userStatusChange"


class PresenceBroadcaster:
    def __init__(self, hub: RealtimeHub):
        self.hub = hub
        self._user_locks: dict = defaultdict(asyncio.Lock)

    def _open_connections(self, user_id) -> list[Connection]:
        return [c for c in self.hub.connections_of(user_id) if not c.closing]

    async def connect(self, connection: Connection) -> None:
        """
        Register the connection and, for the user's first open connection,
        persist ``is_online=True`` and broadcast the change to the team.
        """
        async with self._user_locks[connection.user_id]:
            first = not self._open_connections(connection.user_id)
            self.hub.register(connection)
            if not first:
                return

            change, team_id = await run_in_threadpool(
                users.set_online_status, user_id=connection.user_id, is_online=True, last_seen=utcnow()
            )
            await self.hub.emit(team_channel(team_id), USER_STATUS_CHANGE, change.to_payload())

    async def disconnect(self, connection: Connection) -> None:
        """
        Release the connection. When it was the user's last open one, persist
        ``is_online=False`` with `last_seen` set to now and broadcast the
        change to the rest of the team before the subscriptions are dropped.
        """
        connection.closing = True
        try:
            async with self._user_locks[connection.user_id]:
                if self._open_connections(connection.user_id):
                    return
                change, team_id = await run_in_threadpool(
                    users.set_online_status, user_id=connection.user_id, is_online=False, last_seen=utcnow()
                )
                await self.hub.emit(
                    team_channel(team_id), USER_STATUS_CHANGE, change.to_payload(), exclude=connection
                )
        except Exception:
            logger.exception("presence.offline_failed user=%s", connection.user_id)
        finally:
            self.hub.unregister(connection)
