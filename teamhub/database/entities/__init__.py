"""
Entities Package — SQLAlchemy 2.0 ORM Models (UUID + UTC)
=========================================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by DAOs
(`daos` package) to perform CRUD and transactional operations.

Tech Stack & Conventions
------------------------
- PostgreSQL in production, SQLite in the test-suite
- UUID primary keys (`sqlalchemy.Uuid`, native on PostgreSQL)
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`

Contents
--------
- Team, Department                      (team)
- User                                  (user)
- Project, ProjectAssignment,
  ProjectPhaseStatus, ProjectStatusHistory  (project)
- Note, NoteHistory                     (note)
- ChatRoom, ChatRoomMember, Message,
  MessageSeen                           (chat)
- Notification                          (notification)

Importing this package registers every mapper, so string-based
relationships resolve regardless of which module is imported first.
"""

from teamhub.database.entities.team import Team, Department
from teamhub.database.entities.user import User
from teamhub.database.entities.project import Project, ProjectAssignment, ProjectPhaseStatus, ProjectStatusHistory
from teamhub.database.entities.note import Note, NoteHistory
from teamhub.database.entities.chat import ChatRoom, ChatRoomMember, Message, MessageSeen
from teamhub.database.entities.notification import Notification

__all__ = [
    "Team",
    "Department",
    "User",
    "Project",
    "ProjectAssignment",
    "ProjectPhaseStatus",
    "ProjectStatusHistory",
    "Note",
    "NoteHistory",
    "ChatRoom",
    "ChatRoomMember",
    "Message",
    "MessageSeen",
    "Notification",
]
