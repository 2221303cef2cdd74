"""
Project routes (``/projects``): projects and phases, versioned notes and the
status history.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from teamhub.api.deps import get_current_user, require_leader
from teamhub.api.models import (
    AssignmentCreation,
    NoteCreation,
    NoteUpdate,
    PhaseStatusUpdate,
    ProjectCreation,
    ProjectDuplication,
    ProjectUpdate,
    StatusUpdate,
    UserRead,
)
from teamhub.api.response import send_response
from teamhub.database.core import notes, projects
from teamhub.database.entities.enums import Phase, Priority

router = APIRouter(prefix="/projects", tags=["projects"])

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("")
def list_projects(
    priority: Priority | None = None,
    month: str | None = Query(None, pattern=MONTH_PATTERN),
    search: str | None = None,
    user: UserRead = Depends(get_current_user),
):
    """Projects of the caller's team, newest first, optionally filtered."""
    found = projects.list_projects(team_id=user.team_id, priority=priority, month=month, search=search)
    return send_response(found, "Projects retrieved successfully")


@router.post("/create")
def create_project(data: ProjectCreation, leader: UserRead = Depends(require_leader)):
    project = projects.create_project(
        team_id=leader.team_id,
        name=data.name,
        description=data.description,
        type=data.type,
        priority=data.priority,
        price=data.price,
        deadline=data.deadline,
        assigned_users=data.assigned_users,
    )
    return send_response(project, "Project created successfully", status.HTTP_201_CREATED)


@router.post("/duplicate")
def duplicate_project(data: ProjectDuplication, leader: UserRead = Depends(require_leader)):
    project = projects.duplicate_project(project_id=data.project_id, team_id=leader.team_id, new_month=data.new_month)
    return send_response(project, "Project duplicated successfully", status.HTTP_201_CREATED)


@router.get("/phase/{phase}")
def projects_by_phase(phase: Phase, user: UserRead = Depends(get_current_user)):
    found = projects.get_projects_by_phase(team_id=user.team_id, phase=phase)
    return send_response(found, "Projects retrieved successfully")


@router.get("/month/{month}")
def projects_by_month(month: str = Path(..., pattern=MONTH_PATTERN), user: UserRead = Depends(get_current_user)):
    found = projects.get_projects_by_month(team_id=user.team_id, month=month)
    return send_response(found, "Projects retrieved successfully")


@router.get("/user/{user_id}")
def user_projects(user_id: UUID, user: UserRead = Depends(get_current_user)):
    return send_response(projects.get_user_projects(user_id=user_id), "Projects retrieved successfully")


@router.post("/assign")
def assign_user(data: AssignmentCreation, leader: UserRead = Depends(require_leader)):
    assignment = projects.assign_user(project_id=data.project_id, user_id=data.user_id, phase=data.phase)
    return send_response(assignment, "User assigned successfully")


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

@router.post("/notes")
def create_note(data: NoteCreation, user: UserRead = Depends(get_current_user)):
    """Create version 1 of a note on a project."""
    note = notes.create_note(
        project_id=data.project_id, content=data.content, created_by_id=user.id, comment=data.comment
    )
    return send_response(note, "Note created successfully", status.HTTP_201_CREATED)


@router.patch("/notes/{note_id}")
def update_note(note_id: UUID, data: NoteUpdate, user: UserRead = Depends(get_current_user)):
    """Archive the current version and store the new content as version N+1."""
    note = notes.update_note(note_id=note_id, content=data.content, updated_by_id=user.id, comment=data.comment)
    return send_response(note, "Note updated successfully")


@router.get("/notes/{note_id}/history")
def note_history(note_id: UUID, user: UserRead = Depends(get_current_user)):
    return send_response(notes.get_note_history(note_id=note_id), "Note history retrieved successfully")


@router.delete("/notes/{note_id}")
def delete_note(note_id: UUID, leader: UserRead = Depends(require_leader)):
    notes.delete_note(note_id=note_id)
    return send_response(None, "Note deleted successfully")


# ---------------------------------------------------------------------------
# Single project
# ---------------------------------------------------------------------------

@router.get("/{project_id}")
def get_project(project_id: UUID, user: UserRead = Depends(get_current_user)):
    return send_response(projects.get_project(project_id=project_id), "Project retrieved successfully")


@router.patch("/{project_id}")
def update_project(project_id: UUID, data: ProjectUpdate, leader: UserRead = Depends(require_leader)):
    """Change name, description, priority, price or deadline. Omitted fields stay as they are."""
    project = projects.update_project(project_id=project_id, team_id=leader.team_id, **data.model_dump(exclude_unset=True))
    return send_response(project, "Project updated successfully")


@router.delete("/{project_id}")
def delete_project(project_id: UUID, leader: UserRead = Depends(require_leader)):
    projects.delete_project(project_id=project_id)
    return send_response(None, "Project deleted successfully")


@router.patch("/{project_id}/phases/{phase}")
def update_phase(project_id: UUID, phase: Phase, data: PhaseStatusUpdate, user: UserRead = Depends(get_current_user)):
    phase_status = projects.update_phase_status(project_id=project_id, phase=phase, status=data.status)
    return send_response(phase_status, "Phase status updated successfully")


@router.get("/{project_id}/notes")
def project_notes(project_id: UUID, user: UserRead = Depends(get_current_user)):
    return send_response(notes.get_project_notes(project_id=project_id), "Notes retrieved successfully")


@router.post("/{project_id}/status")
def update_status(project_id: UUID, data: StatusUpdate, leader: UserRead = Depends(require_leader)):
    """Change the project status; the transition is appended to the history."""
    project = projects.update_status(
        project_id=project_id, status=data.status, updated_by_id=leader.id, comment=data.comment
    )
    return send_response(project, "Project status updated successfully")


@router.get("/{project_id}/status-history")
def status_history(project_id: UUID, user: UserRead = Depends(get_current_user)):
    return send_response(projects.get_status_history(project_id=project_id), "Status history retrieved successfully")
