"""
Note / NoteHistory ORM Models
=============================

Versioned project notes. A ``Note`` row is the current version of one note
lineage and is updated in place; before every update the previous content is
archived as an immutable ``NoteHistory`` row carrying the version it had.

Invariant
~~~~~~~~~
For one lineage the versions of ``{note} ∪ history`` form the run ``1..N``.
"""

from teamhub.database.config.connection_engine import declarativeBase
from teamhub.database.helpers.timeutils import utcnow
from sqlalchemy import ForeignKey, DateTime, Integer, TEXT, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime


class Note(declarativeBase):
    """
    ORM model for the `note` table.

    Attributes
    ----------
    content : str
        Current content.
    version : int
        Starts at 1, incremented by exactly one per update.
    project_id : UUID
        Project the note belongs to.
    created_by_id : UUID | None
        Author of the first version.
    comment : str | None
        Comment given with the current version.
    """

    __tablename__ = "note"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    project_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("project.id"), nullable=False, index=True)
    created_by_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=True)
    comment: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    created_by = relationship("User")


class NoteHistory(declarativeBase):
    """Snapshot of a note as it was before one update. Never modified."""

    __tablename__ = "note_history"
    __table_args__ = (UniqueConstraint("note_id", "version", name="uq_note_history_note_id_version"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    note_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("note.id"), nullable=False, index=True)
    created_by_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=True)
    comment: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    created_by = relationship("User")
