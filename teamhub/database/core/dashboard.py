"""
Dashboard counters for the caller's team.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from teamhub.api.errors import NotFound
from teamhub.api.models import DashboardMember, DashboardProject, DashboardStats
from teamhub.database.daos.notification_dao import NotificationDao
from teamhub.database.daos.project_dao import ProjectDao
from teamhub.database.daos.user_dao import UserDao
from teamhub.database.entities.enums import ProjectStatus
from teamhub.database.helpers.transactionManagement import transactional

CLOSED_STATUSES = (ProjectStatus.DELIVERED, ProjectStatus.CANCELLED)
RECENT_PROJECTS = 5


@transactional
def get_dashboard_stats(session: Session, user_id: UUID) -> DashboardStats:
    """
    Summarize the team of a user.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    user_id : UUID
        Caller; the counters cover the caller's team and the notification
        count covers the caller only.

    Returns
    -------
    DashboardStats
        Approved member count, projects that are neither delivered nor
        cancelled, unread notifications, and the five newest projects with
        their distinct assigned users. Leaders also get the number of
        accounts waiting for approval.

    Raises
    ------
    NotFound
        If the user does not exist.
    """
    user_dao = UserDao()
    project_dao = ProjectDao()
    user = user_dao.fetchUserById(session, user_id)
    if user is None:
        raise NotFound("User not found")

    recent = []
    for project in project_dao.fetchProjectsByTeamId(session, user.team_id, limit=RECENT_PROJECTS):
        members = {a.user_id: a.user for a in project.assignments}
        recent.append(
            DashboardProject(
                id=project.id,
                name=project.name,
                type=project.type,
                deadline=project.deadline,
                project_status=project.project_status,
                assigned_users=[DashboardMember.model_validate(u) for u in members.values()],
            )
        )

    return DashboardStats(
        total_members=user_dao.countUsersByTeamId(session, user.team_id),
        active_projects=project_dao.countOpenProjects(session, user.team_id, CLOSED_STATUSES),
        pending_notifications=NotificationDao().countUnread(session, user.id),
        pending_approvals=len(user_dao.fetchPendingUsersByTeamId(session, user.team_id)) if user.is_team_leader else 0,
        recent_projects=recent,
    )
