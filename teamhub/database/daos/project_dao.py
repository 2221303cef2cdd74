"""
Project DAO

Purpose
-------
Data-access layer for `Project` and the rows it owns:
- Projects: create, fetch by id, list with a deadline inside a window
- Team views: filtered listing, by project type, by assigned user, counts
- Assignments: create, fetch, list the users assigned to a project
- Phase statuses: create, fetch one phase
- Status history: append a transition, list transitions newest first
- Cascading delete of everything a project owns

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
- `deleteProjectCascade` issues an ordered sequence of deletes; run it inside
  one `@transactional` call so a failure leaves nothing half-deleted.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, desc, func, or_, select
from sqlalchemy.orm import Session

from teamhub.database.daos.note_dao import NoteDao
from teamhub.database.entities.enums import Phase, Priority, ProjectStatus, ProjectType
from teamhub.database.entities.project import (
    Project,
    ProjectAssignment,
    ProjectPhaseStatus,
    ProjectStatusHistory,
)

logger = logging.getLogger(__name__)


class ProjectDao:
    """
    Data Access Object (DAO) for Project entities and their children.
    """

    def createProject(self, session: Session, project: Project) -> Project:
        """
        Stage a new project and flush it so children can reference its id.

        Raises
        ------
        Exception
            If the insert fails.
        """
        try:
            session.add(project)
            session.flush()
            return project
        except Exception as e:
            logger.error("Error in ProjectDao.createProject. Error Message: %s", e)
            raise e

    def fetchProjectById(self, session: Session, project_id: UUID) -> Project | None:
        return session.get(Project, project_id)

    def fetchProjectsByTeamId(
        self,
        session: Session,
        team_id: UUID,
        priority: Priority | None = None,
        month: str | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[Project]:
        """
        Fetch the projects of a team, newest first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        team_id : UUID
            Owning team.
        priority : Priority | None
            Keep only projects with this priority.
        month : str | None
            Keep only projects whose `creation_month` equals this ``YYYY-MM``.
        search : str | None
            Case-insensitive match against name or description.
        limit : int | None
            Maximum number of rows.

        Returns
        -------
        list[Project]
            Matching projects ordered by descending `created_at`.
        """
        try:
            query = session.query(Project).filter(Project.team_id == team_id)
            if priority is not None:
                query = query.filter(Project.priority == priority)
            if month is not None:
                query = query.filter(Project.creation_month == month)
            if search:
                pattern = f"%{search}%"
                query = query.filter(or_(Project.name.ilike(pattern), Project.description.ilike(pattern)))
            query = query.order_by(desc(Project.created_at))
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except Exception as e:
            logger.error("Error in ProjectDao.fetchProjectsByTeamId. Error Message: %s", e)
            raise e

    def fetchProjectsByTypes(self, session: Session, team_id: UUID, types: list[ProjectType]) -> list[Project]:
        return (
            session.query(Project)
            .filter(Project.team_id == team_id, Project.type.in_(types))
            .order_by(desc(Project.created_at))
            .all()
        )

    def fetchProjectsByUserId(self, session: Session, user_id: UUID) -> list[Project]:
        assigned = select(ProjectAssignment.project_id).where(ProjectAssignment.user_id == user_id)
        return (
            session.query(Project)
            .filter(Project.id.in_(assigned))
            .order_by(desc(Project.created_at))
            .all()
        )

    def countOpenProjects(self, session: Session, team_id: UUID, closed: tuple[ProjectStatus, ...]) -> int:
        return session.scalar(
            select(func.count(Project.id)).where(Project.team_id == team_id, Project.project_status.not_in(closed))
        )

    def fetchProjectsWithDeadlineBetween(self, session: Session, start: datetime, end: datetime) -> list[Project]:
        """
        Fetch projects whose deadline lies in ``(start, end]``.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        start, end : datetime
            Bounds of the window (UTC).

        Returns
        -------
        list[Project]
            Matching projects ordered by deadline.
        """
        return (
            session.query(Project)
            .filter(Project.deadline > start)
            .filter(Project.deadline <= end)
            .order_by(Project.deadline)
            .all()
        )

    def createAssignment(self, session: Session, assignment: ProjectAssignment) -> ProjectAssignment:
        try:
            session.add(assignment)
            session.flush()
            return assignment
        except Exception as e:
            logger.error("Error in ProjectDao.createAssignment. Error Message: %s", e)
            raise e

    def fetchAssignment(self, session: Session, project_id: UUID, user_id: UUID, phase: Phase) -> ProjectAssignment | None:
        return (
            session.query(ProjectAssignment)
            .filter(
                ProjectAssignment.project_id == project_id,
                ProjectAssignment.user_id == user_id,
                ProjectAssignment.phase == phase,
            )
            .one_or_none()
        )

    def fetchAssignedUserIds(self, session: Session, project_id: UUID) -> list[UUID]:
        rows = (
            session.query(ProjectAssignment.user_id)
            .filter(ProjectAssignment.project_id == project_id)
            .distinct()
            .all()
        )
        return [row.user_id for row in rows]

    def createPhaseStatus(self, session: Session, phase_status: ProjectPhaseStatus) -> ProjectPhaseStatus:
        session.add(phase_status)
        return phase_status

    def fetchPhaseStatus(self, session: Session, project_id: UUID, phase: Phase) -> ProjectPhaseStatus | None:
        return (
            session.query(ProjectPhaseStatus)
            .filter(ProjectPhaseStatus.project_id == project_id, ProjectPhaseStatus.phase == phase)
            .one_or_none()
        )

    def createStatusHistory(self, session: Session, entry: ProjectStatusHistory) -> ProjectStatusHistory:
        """
        Append one status transition.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        entry : ProjectStatusHistory
            The transition row; never updated afterwards.

        Returns
        -------
        ProjectStatusHistory
            The flushed row.
        """
        try:
            session.add(entry)
            session.flush()
            return entry
        except Exception as e:
            logger.error("Error in ProjectDao.createStatusHistory. Error Message: %s", e)
            raise e

    def fetchStatusHistory(self, session: Session, project_id: UUID, limit: int | None = None) -> list[ProjectStatusHistory]:
        query = (
            session.query(ProjectStatusHistory)
            .filter(ProjectStatusHistory.project_id == project_id)
            .order_by(desc(ProjectStatusHistory.created_at))
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def deleteProjectCascade(self, session: Session, project: Project) -> None:
        """
        Delete a project and everything it owns, children first.

        Order: assignments, phase statuses, status history, note history and
        notes, then the project row.
        """
        try:
            session.execute(delete(ProjectAssignment).where(ProjectAssignment.project_id == project.id))
            session.execute(delete(ProjectPhaseStatus).where(ProjectPhaseStatus.project_id == project.id))
            session.execute(delete(ProjectStatusHistory).where(ProjectStatusHistory.project_id == project.id))
            NoteDao().deleteNotesByProjectId(session, project.id)
            session.delete(project)
            session.flush()
        except Exception as e:
            logger.error("Error in ProjectDao.deleteProjectCascade. Error Message: %s", e)
            raise e
