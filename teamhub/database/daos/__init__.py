"""
DAOs Package — Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer for the application.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean CRUD APIs for the service layer while hiding direct query details.

Conventions
-----------
- SQLAlchemy 2.0 typed mappings (Mapped[...] / mapped_column)
- Session lifecycle (open/commit/rollback) is handled by callers
  (`@transactional` service functions in `teamhub.database.core`)
- DAOs surface exceptions so upper layers decide error policy

Contents
--------
- UserDao
    Users: creation with password hashing, lookups by id/e-mail/team,
    presence (online users, online flag + last seen), team leaders

- TeamDao
    Teams and departments

- ProjectDao
    Projects, assignments, phase statuses, the append-only status history
    and the cascading project delete

- NoteDao
    Notes and their immutable history snapshots

- ChatDao
    Chat rooms, memberships, messages and seen-receipts

- NotificationDao
    In-app notifications: create, list per user, mark all read
"""
