"""
Team and Department ORM Models
==============================

A ``Team`` is the tenant of the application: it owns users, departments,
projects and chat rooms through ``team_id`` foreign keys. A ``Department``
groups the users of one team.
"""

from teamhub.database.config.connection_engine import declarativeBase
from teamhub.database.helpers.timeutils import utcnow
from sqlalchemy import ForeignKey, DateTime, VARCHAR, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime


class Team(declarativeBase):
    """
    ORM model for the `team` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    name : str
        Display name of the team; unique, members register by it.
    created_at : datetime
        Registration timestamp (UTC).
    """

    __tablename__ = "team"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    users = relationship("User", back_populates="team")
    departments = relationship("Department", back_populates="team")

    def __str__(self) -> str:
        return f"Team: id:{self.id}, name: {self.name}"


class Department(declarativeBase):
    """
    ORM model for the `department` table. Department names are unique per team.
    """

    __tablename__ = "department"
    __table_args__ = (UniqueConstraint("team_id", "name", name="uq_department_team_id_name"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("team.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    team = relationship("Team", back_populates="departments")
