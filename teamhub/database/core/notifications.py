"""
Service-layer operations for in-app notifications and deadline alerts.
"""

import logging
import math
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from teamhub.api.errors import Forbidden, NotFound
from teamhub.api.models import DeadlineAlert, NotificationRead
from teamhub.database.daos.notification_dao import NotificationDao
from teamhub.database.daos.project_dao import ProjectDao
from teamhub.database.daos.user_dao import UserDao
from teamhub.database.entities.enums import NotificationType
from teamhub.database.entities.notification import Notification
from teamhub.database.helpers.timeutils import as_utc
from teamhub.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

ALERT_DAYS = (4, 1)
"""Remaining whole days that trigger a deadline alert."""


def deadline_title(days_left: int) -> str:
    prefix = "URGENT" if days_left == 1 else "WARNING"
    return f"{prefix}: Project Deadline Approaching"


def deadline_content(project_name: str, days_left: int) -> str:
    unit = "day" if days_left == 1 else "days"
    return f'Project "{project_name}" has {days_left} {unit} left until the deadline.'


@transactional
def get_notifications(session: Session, user_id: UUID) -> list[NotificationRead]:
    return [NotificationRead.model_validate(n) for n in NotificationDao().fetchByUserId(session, user_id)]


@transactional
def mark_notification_read(session: Session, notification_id: UUID, user_id: UUID) -> NotificationRead:
    """
    Mark one notification as read.

    Raises
    ------
    NotFound
        If the notification does not exist.
    Forbidden
        If it is addressed to another user.
    """
    notification = NotificationDao().fetchById(session, notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    if notification.user_id != user_id:
        raise Forbidden("This notification belongs to another user")
    notification.is_read = True
    session.flush()
    return NotificationRead.model_validate(notification)


@transactional
def mark_all_notifications_read(session: Session, user_id: UUID) -> int:
    return NotificationDao().markAllRead(session, user_id)


@transactional
def collect_deadline_alerts(session: Session, now: datetime) -> list[DeadlineAlert]:
    """
    Write deadline notifications for projects that are 4 days or 1 day away.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    now : datetime
        Reference time (UTC).

    Returns
    -------
    list[DeadlineAlert]
        One alert per matching project, to be emitted on the project's team
        channel by the caller after this transaction commits.

    Notes
    -----
    Remaining time is rounded up to whole days, so a deadline 3 days and 2
    hours away counts as 4. Recipients are the team leaders and every user
    assigned to the project, each notified once.
    """
    project_dao = ProjectDao()
    user_dao = UserDao()
    notification_dao = NotificationDao()

    alerts = []
    window_end = now + timedelta(days=max(ALERT_DAYS))
    for project in project_dao.fetchProjectsWithDeadlineBetween(session, now, window_end):
        deadline = as_utc(project.deadline)
        days_left = math.ceil((deadline - now) / timedelta(days=1))
        if days_left not in ALERT_DAYS:
            continue

        recipients = [u.id for u in user_dao.fetchTeamLeaders(session, project.team_id)]
        for user_id in project_dao.fetchAssignedUserIds(session, project.id):
            if user_id not in recipients:
                recipients.append(user_id)

        for user_id in recipients:
            notification_dao.createNotification(
                session,
                Notification(
                    title=deadline_title(days_left),
                    content=deadline_content(project.name, days_left),
                    type=NotificationType.DEADLINE,
                    user_id=user_id,
                ),
            )
        logger.info(
            "deadline.alert project=%s days_left=%s recipients=%s", project.id, days_left, len(recipients)
        )
        alerts.append(
            DeadlineAlert(
                project_id=project.id,
                project_name=project.name,
                days_left=days_left,
                deadline=deadline,
                team_id=project.team_id,
            )
        )

    session.flush()
    return alerts
