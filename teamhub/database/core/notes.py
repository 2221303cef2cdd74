"""
Service-layer operations for versioned project notes.

A note is updated in place; before each update its previous content is
archived as a `NoteHistory` row that keeps the version it had. The archive
write and the in-place update share one `@transactional` unit, so the
versions of a note and its history always form the run ``1..N``.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamhub.api.errors import Conflict, NotFound
from teamhub.api.models import NoteHistoryRead, NoteHistoryView, NoteRead
from teamhub.database.daos.note_dao import NoteDao
from teamhub.database.daos.project_dao import ProjectDao
from teamhub.database.entities.note import Note, NoteHistory
from teamhub.database.helpers.timeutils import utcnow
from teamhub.database.helpers.transactionManagement import transactional

DEFAULT_HISTORY_COMMENT = "Previous version"


@transactional
def create_note(
    session: Session, project_id: UUID, content: str, created_by_id: UUID, comment: str | None = None
) -> NoteRead:
    """
    Create version 1 of a note.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    project_id : UUID
        Project the note belongs to.
    content : str
        Initial content.
    created_by_id : UUID
        Author.
    comment : str | None
        Optional comment attached to the first version.

    Returns
    -------
    NoteRead
        The created note.

    Raises
    ------
    NotFound
        If the project does not exist.
    """
    if ProjectDao().fetchProjectById(session, project_id) is None:
        raise NotFound("Project not found")

    note = NoteDao().createNote(
        session,
        Note(
            content=content,
            version=1,
            project_id=project_id,
            created_by_id=created_by_id,
            comment=comment,
        ),
    )
    return NoteRead.model_validate(note)


@transactional
def update_note(
    session: Session, note_id: UUID, content: str, updated_by_id: UUID, comment: str | None = None
) -> NoteRead:
    """
    Archive the current version of a note and replace it with new content.

    The archived row carries the old content, version, author and comment
    (``"Previous version"`` when the old version had none). The note then
    gets the new content and comment, its version is incremented by one and
    `updated_at` is refreshed. `created_by_id` keeps pointing at the author of
    the first version; `updated_by_id` is only used for logging.

    Raises
    ------
    NotFound
        If the note does not exist.
    Conflict
        If a concurrent update archived the same version first.
    """
    note_dao = NoteDao()
    note = note_dao.fetchNoteById(session, note_id)
    if note is None:
        raise NotFound("Note not found")

    try:
        note_dao.createNoteHistory(
            session,
            NoteHistory(
                content=note.content,
                version=note.version,
                note_id=note.id,
                created_by_id=note.created_by_id,
                comment=note.comment or DEFAULT_HISTORY_COMMENT,
            ),
        )
    except IntegrityError as e:
        # another update already archived this version
        raise Conflict("Note was updated concurrently; reload it and try again") from e

    note.content = content
    note.version = note.version + 1
    note.comment = comment
    note.updated_at = utcnow()
    session.flush()
    return NoteRead.model_validate(note)


@transactional
def get_note_history(session: Session, note_id: UUID) -> NoteHistoryView:
    """
    Return the current note and its archived versions, newest first.

    Raises
    ------
    NotFound
        If the note does not exist.
    """
    note_dao = NoteDao()
    note = note_dao.fetchNoteById(session, note_id)
    if note is None:
        raise NotFound("Note not found")

    return NoteHistoryView(
        current=NoteRead.model_validate(note),
        history=[NoteHistoryRead.model_validate(h) for h in note_dao.fetchHistoryByNoteId(session, note_id)],
    )


@transactional
def delete_note(session: Session, note_id: UUID) -> None:
    """
    Delete a note together with its whole history.

    Raises
    ------
    NotFound
        If the note does not exist.
    """
    note_dao = NoteDao()
    note = note_dao.fetchNoteById(session, note_id)
    if note is None:
        raise NotFound("Note not found")

    note_dao.deleteHistoryByNoteId(session, note_id)
    note_dao.deleteNote(session, note)


@transactional
def get_project_notes(session: Session, project_id: UUID) -> list[NoteRead]:
    if ProjectDao().fetchProjectById(session, project_id) is None:
        raise NotFound("Project not found")
    return [NoteRead.model_validate(n) for n in NoteDao().fetchNotesByProjectId(session, project_id)]
