"""
Real-time layer
===============

WebSocket transport for chat and presence.

Contents
--------
- hub        `RealtimeHub` / `Connection`: connection registry, channels, ordered broadcast
- presence   `PresenceBroadcaster`: online flag bookkeeping and `userStatusChange`
- fanout     `ChatFanout`: persist-then-broadcast chat mutations
- gateway    ``/ws`` endpoint: token handshake and client event dispatch
- deadlines  periodic deadline checker emitting `deadlineAlert`

Nothing in this package writes to the database except through
`teamhub.database.core`.
"""
