"""
Note DAO

Purpose
-------
Data-access layer for `Note` and its `NoteHistory` snapshots:
- Create notes and history snapshots
- Fetch a note, the notes of a project, the history of a note
- Delete history rows and notes (used by the cascading deletes)

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller. Cascades
  are ordered sequences of these calls executed inside one `@transactional`
  service function, so they commit or roll back together.
- History rows are only ever inserted or deleted, never updated.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.orm import Session

from teamhub.database.entities.note import Note, NoteHistory

logger = logging.getLogger(__name__)


class NoteDao:
    """
    Data Access Object (DAO) for Note and NoteHistory entities.
    """

    def createNote(self, session: Session, note: Note) -> Note:
        """
        Stage a new note.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        note : Note
            Note entity to insert.

        Returns
        -------
        Note
            The flushed note.
        """
        try:
            session.add(note)
            session.flush()
            return note
        except Exception as e:
            logger.error("Error in NoteDao.createNote. Error Message: %s", e)
            raise e

    def fetchNoteById(self, session: Session, note_id: UUID) -> Note | None:
        return session.get(Note, note_id)

    def fetchNotesByProjectId(self, session: Session, project_id: UUID) -> list[Note]:
        return (
            session.query(Note)
            .filter(Note.project_id == project_id)
            .order_by(desc(Note.updated_at))
            .all()
        )

    def createNoteHistory(self, session: Session, history: NoteHistory) -> NoteHistory:
        try:
            session.add(history)
            session.flush()
            return history
        except Exception as e:
            logger.error("Error in NoteDao.createNoteHistory. Error Message: %s", e)
            raise e

    def fetchHistoryByNoteId(self, session: Session, note_id: UUID) -> list[NoteHistory]:
        """
        Fetch the history snapshots of a note, highest version first.

        Returns
        -------
        list[NoteHistory]
            Snapshots ordered by descending version.
        """
        try:
            return (
                session.query(NoteHistory)
                .filter(NoteHistory.note_id == note_id)
                .order_by(desc(NoteHistory.version))
                .all()
            )
        except Exception as e:
            logger.error("Error in NoteDao.fetchHistoryByNoteId. Error Message: %s", e)
            raise e

    def deleteHistoryByNoteId(self, session: Session, note_id: UUID) -> int:
        result = session.execute(delete(NoteHistory).where(NoteHistory.note_id == note_id))
        return result.rowcount

    def deleteNote(self, session: Session, note: Note) -> None:
        session.delete(note)
        session.flush()

    def deleteNotesByProjectId(self, session: Session, project_id: UUID) -> None:
        """Delete every note of a project together with the notes' history."""
        note_ids = select(Note.id).where(Note.project_id == project_id)
        session.execute(delete(NoteHistory).where(NoteHistory.note_id.in_(note_ids)))
        session.execute(delete(Note).where(Note.project_id == project_id))
