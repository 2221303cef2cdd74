"""
Notification DAO

Purpose
-------
Persists and reads in-app notifications:
- createNotification(session, Notification) — stages a notification
- fetchByUserId(session, user_id) — a user's notifications, newest first
- fetchById(session, notification_id)
- markAllRead(session, user_id) — flags every unread notification of a user
- countUnread(session, user_id) — unread notifications of a user
"""

import logging
from uuid import UUID

from sqlalchemy import desc, func, select, update
from sqlalchemy.orm import Session

from teamhub.database.entities.notification import Notification

logger = logging.getLogger(__name__)


class NotificationDao:

    def createNotification(self, session: Session, notification: Notification) -> Notification:
        try:
            session.add(notification)
            return notification
        except Exception as e:
            logger.error("Error in NotificationDao.createNotification. Error: %s", e)
            raise e

    def fetchByUserId(self, session: Session, user_id: UUID) -> list[Notification]:
        return (
            session.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(desc(Notification.created_at))
            .all()
        )

    def fetchById(self, session: Session, notification_id: UUID) -> Notification | None:
        return session.get(Notification, notification_id)

    def markAllRead(self, session: Session, user_id: UUID) -> int:
        """Return the number of notifications that switched to read."""
        result = session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount

    def countUnread(self, session: Session, user_id: UUID) -> int:
        return session.scalar(
            select(func.count(Notification.id)).where(Notification.user_id == user_id, Notification.is_read.is_(False))
        )
