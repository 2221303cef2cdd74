"""
Notification ORM Model
======================

In-app notification addressed to one user. The deadline checker writes
``DEADLINE`` notifications; users mark them read one by one or all at once.
"""

from teamhub.database.config.connection_engine import declarativeBase
from teamhub.database.entities.enums import NotificationType
from teamhub.database.helpers.timeutils import utcnow
from sqlalchemy import Boolean, ForeignKey, DateTime, Enum, TEXT, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid import UUID
import uuid
from datetime import datetime


class Notification(declarativeBase):
    __tablename__ = "notification"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type"), nullable=False, default=NotificationType.GENERAL
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __str__(self) -> str:
        return f"Notification: user:{self.user_id}, title: {self.title}, read: {self.is_read}"
