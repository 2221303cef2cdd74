"""
Service-layer operations for projects, phases and the status history.

Every status change is recorded: `update_status` appends a
`ProjectStatusHistory` row with the status the project had and the status it
gets, then mutates the project, all inside one `@transactional` unit.

Projects are bucketed by `creation_month` (``YYYY-MM``). Duplicating a
project copies it into another month with fresh phase statuses.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from teamhub.api.errors import BadRequest, NotFound
from teamhub.api.models import (
    AssignmentInput,
    AssignmentRead,
    PhaseStatusRead,
    ProjectRead,
    ProjectStatusView,
    StatusHistoryRead,
)
from teamhub.database.daos.project_dao import ProjectDao
from teamhub.database.daos.team_dao import TeamDao
from teamhub.database.daos.user_dao import UserDao
from teamhub.database.entities.enums import (
    PHASES_BY_PROJECT_TYPE,
    Phase,
    PhaseStatus,
    Priority,
    ProjectStatus,
    ProjectType,
)
from teamhub.database.entities.project import (
    Project,
    ProjectAssignment,
    ProjectPhaseStatus,
    ProjectStatusHistory,
)
from teamhub.database.helpers.timeutils import utcnow
from teamhub.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

RECENT_HISTORY_LIMIT = 5


def _assign(session: Session, project: Project, user_id: UUID, phase: Phase) -> ProjectAssignment:
    project_dao = ProjectDao()
    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.team_id != project.team_id:
        raise BadRequest("User does not belong to the project's team")

    existing = project_dao.fetchAssignment(session, project.id, user_id, phase)
    if existing is not None:
        return existing
    return project_dao.createAssignment(
        session, ProjectAssignment(project_id=project.id, user_id=user_id, phase=phase)
    )


@transactional
def create_project(
    session: Session,
    team_id: UUID,
    name: str,
    type: ProjectType,
    deadline,
    description: str | None = None,
    priority: Priority = Priority.MEDIUM,
    price=None,
    assigned_users: list[AssignmentInput] | None = None,
) -> ProjectRead:
    """
    Create a project with one phase-status row per phase of its type.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    team_id : UUID
        Owning team.
    name : str
        Project name.
    type : ProjectType
        Decides the phases (see `PHASES_BY_PROJECT_TYPE`).
    deadline : datetime
        Due date (UTC).
    description, priority, price
        Optional descriptive fields.
    assigned_users : list[AssignmentInput] | None
        Initial (user, phase) assignments; users must belong to the team.

    Returns
    -------
    ProjectRead
        The project with its phase statuses and assignments.

    Raises
    ------
    NotFound
        If the team or an assigned user does not exist.
    BadRequest
        If an assigned user belongs to another team.
    """
    if TeamDao().fetchTeamById(session, team_id) is None:
        raise NotFound("Team not found")

    project_dao = ProjectDao()
    project = project_dao.createProject(
        session,
        Project(
            name=name,
            description=description,
            type=type,
            priority=priority,
            price=price,
            deadline=deadline,
            project_status=ProjectStatus.NOT_STARTED,
            creation_month=utcnow().strftime("%Y-%m"),
            team_id=team_id,
        ),
    )
    for phase in PHASES_BY_PROJECT_TYPE[type]:
        project_dao.createPhaseStatus(
            session, ProjectPhaseStatus(project_id=project.id, phase=phase, status=PhaseStatus.STARTED)
        )
    for assignment in assigned_users or []:
        _assign(session, project, assignment.user_id, assignment.phase)

    session.flush()
    session.refresh(project)
    logger.info("project.created id=%s team=%s type=%s", project.id, team_id, type.value)
    return ProjectRead.model_validate(project)


@transactional
def get_project(session: Session, project_id: UUID) -> ProjectRead:
    project = ProjectDao().fetchProjectById(session, project_id)
    if project is None:
        raise NotFound("Project not found")
    return ProjectRead.model_validate(project)


@transactional
def assign_user(session: Session, project_id: UUID, user_id: UUID, phase: Phase) -> AssignmentRead:
    """
    Assign a user to one phase of a project. Repeating an existing assignment
    returns it unchanged.
    """
    project = ProjectDao().fetchProjectById(session, project_id)
    if project is None:
        raise NotFound("Project not found")
    return AssignmentRead.model_validate(_assign(session, project, user_id, phase))


@transactional
def update_phase_status(session: Session, project_id: UUID, phase: Phase, status: PhaseStatus) -> PhaseStatusRead:
    """
    Set the status of one phase.

    Raises
    ------
    NotFound
        If the project does not run the given phase.
    """
    phase_status = ProjectDao().fetchPhaseStatus(session, project_id, phase)
    if phase_status is None:
        raise NotFound("Phase not found for this project")
    phase_status.status = status
    phase_status.updated_at = utcnow()
    session.flush()
    return PhaseStatusRead.model_validate(phase_status)


@transactional
def delete_project(session: Session, project_id: UUID) -> None:
    """
    Delete a project with its assignments, phase statuses, status history and
    notes. Either everything goes or nothing does.
    """
    project_dao = ProjectDao()
    project = project_dao.fetchProjectById(session, project_id)
    if project is None:
        raise NotFound("Project not found")
    project_dao.deleteProjectCascade(session, project)
    logger.info("project.deleted id=%s", project_id)


@transactional
def update_status(
    session: Session,
    project_id: UUID,
    status: ProjectStatus,
    updated_by_id: UUID,
    comment: str | None = None,
) -> ProjectStatusView:
    """
    Change the status of a project and record the transition.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    project_id : UUID
        Target project.
    status : ProjectStatus
        Requested status. Any status may follow any other, including itself.
    updated_by_id : UUID
        Acting user, stored on the history row.
    comment : str | None
        Optional justification.

    Returns
    -------
    ProjectStatusView
        The updated project with its five most recent transitions, newest
        first, each with the acting user expanded.

    Raises
    ------
    BadRequest
        If the project id or the acting user id is missing.
    NotFound
        If the project does not exist.

    Notes
    -----
    Moving to ``DELIVERED`` stamps `delivery_date` with the current time.
    Leaving ``DELIVERED`` keeps the stamp.
    """
    if project_id is None or updated_by_id is None:
        raise BadRequest("Project id and user id are required")

    project_dao = ProjectDao()
    project = project_dao.fetchProjectById(session, project_id)
    if project is None:
        raise NotFound("Project not found")

    old_status = project.project_status
    project_dao.createStatusHistory(
        session,
        ProjectStatusHistory(
            project_id=project.id,
            old_status=old_status,
            new_status=status,
            comment=comment,
            updated_by_id=updated_by_id,
        ),
    )

    project.project_status = status
    if status == ProjectStatus.DELIVERED:
        project.delivery_date = utcnow()
    session.flush()

    logger.info(
        "project.status_changed id=%s old=%s new=%s by=%s", project.id, old_status.value, status.value, updated_by_id
    )
    view = ProjectStatusView.model_validate(project)
    view.status_history = [
        StatusHistoryRead.model_validate(h)
        for h in project_dao.fetchStatusHistory(session, project.id, limit=RECENT_HISTORY_LIMIT)
    ]
    return view


@transactional
def get_status_history(session: Session, project_id: UUID) -> list[StatusHistoryRead]:
    """
    Return every recorded transition of a project, newest first.

    Raises
    ------
    NotFound
        If the project does not exist.
    """
    project_dao = ProjectDao()
    if project_dao.fetchProjectById(session, project_id) is None:
        raise NotFound("Project not found")
    return [StatusHistoryRead.model_validate(h) for h in project_dao.fetchStatusHistory(session, project_id)]


def _team_project(session: Session, project_id: UUID, team_id: UUID) -> Project:
    project = ProjectDao().fetchProjectById(session, project_id)
    if project is None or project.team_id != team_id:
        raise NotFound("Project not found")
    return project


@transactional
def list_projects(
    session: Session,
    team_id: UUID,
    priority: Priority | None = None,
    month: str | None = None,
    search: str | None = None,
) -> list[ProjectRead]:
    """
    List the projects of a team, newest first.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    team_id : UUID
        Team whose projects are listed.
    priority : Priority | None
        Keep only this priority.
    month : str | None
        Keep only projects created in (or duplicated into) this ``YYYY-MM``.
    search : str | None
        Case-insensitive substring of the name or description.
    """
    found = ProjectDao().fetchProjectsByTeamId(session, team_id, priority=priority, month=month, search=search)
    return [ProjectRead.model_validate(p) for p in found]


@transactional
def update_project(session: Session, project_id: UUID, team_id: UUID, **fields) -> ProjectRead:
    """
    Change the descriptive fields of a project.

    Only ``name``, ``description``, ``priority``, ``price`` and ``deadline``
    are accepted. The type fixes the phases and the status goes through
    `update_status`, so neither can be changed here.

    Raises
    ------
    NotFound
        If the project does not exist in the team.
    BadRequest
        If another field is passed, or name, priority or deadline is cleared.
    """
    unknown = set(fields) - {"name", "description", "priority", "price", "deadline"}
    if unknown:
        raise BadRequest(f"Cannot update: {', '.join(sorted(unknown))}")
    for required in ("name", "priority", "deadline"):
        if required in fields and fields[required] is None:
            raise BadRequest(f"{required} cannot be empty")

    project = _team_project(session, project_id, team_id)
    for key, value in fields.items():
        setattr(project, key, value)
    session.flush()
    session.refresh(project)
    return ProjectRead.model_validate(project)


@transactional
def get_projects_by_phase(session: Session, team_id: UUID, phase: Phase) -> list[ProjectRead]:
    """
    Projects of the team whose type runs the given phase. Each project only
    lists the assignments of that phase.
    """
    types = [t for t, phases in PHASES_BY_PROJECT_TYPE.items() if phase in phases]
    result = []
    for project in ProjectDao().fetchProjectsByTypes(session, team_id, types):
        view = ProjectRead.model_validate(project)
        view.assignments = [a for a in view.assignments if a.phase == phase]
        result.append(view)
    return result


@transactional
def get_projects_by_month(session: Session, team_id: UUID, month: str) -> list[ProjectRead]:
    return [
        ProjectRead.model_validate(p) for p in ProjectDao().fetchProjectsByTeamId(session, team_id, month=month)
    ]


@transactional
def get_user_projects(session: Session, user_id: UUID) -> list[ProjectRead]:
    """
    Projects the user is assigned to in at least one phase.

    Raises
    ------
    NotFound
        If the user does not exist.
    """
    if UserDao().fetchUserById(session, user_id) is None:
        raise NotFound("User not found")
    return [ProjectRead.model_validate(p) for p in ProjectDao().fetchProjectsByUserId(session, user_id)]


@transactional
def duplicate_project(session: Session, project_id: UUID, team_id: UUID, new_month: str) -> ProjectRead:
    """
    Copy a project into another month.

    The copy keeps the descriptive fields, the deadline and every assignment.
    It starts over as ``NOT_STARTED`` with every phase ``STARTED``, without
    status history or notes.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    project_id : UUID
        Project to copy.
    team_id : UUID
        Caller's team; the project must belong to it.
    new_month : str
        ``YYYY-MM`` the copy is filed under.

    Raises
    ------
    NotFound
        If the project does not exist in the team.
    """
    project_dao = ProjectDao()
    original = _team_project(session, project_id, team_id)
    copy = project_dao.createProject(
        session,
        Project(
            name=original.name,
            description=original.description,
            type=original.type,
            priority=original.priority,
            price=original.price,
            deadline=original.deadline,
            project_status=ProjectStatus.NOT_STARTED,
            creation_month=new_month,
            team_id=original.team_id,
        ),
    )
    for phase in PHASES_BY_PROJECT_TYPE[original.type]:
        project_dao.createPhaseStatus(
            session, ProjectPhaseStatus(project_id=copy.id, phase=phase, status=PhaseStatus.STARTED)
        )
    for assignment in list(original.assignments):
        project_dao.createAssignment(
            session, ProjectAssignment(project_id=copy.id, user_id=assignment.user_id, phase=assignment.phase)
        )

    session.flush()
    session.refresh(copy)
    logger.info("project.duplicated id=%s from=%s month=%s", copy.id, original.id, new_month)
    return ProjectRead.model_validate(copy)
