"""
Project ORM Models
==================

``Project`` and the rows it owns:

- ``ProjectAssignment``: a user assigned to one phase of the project
- ``ProjectPhaseStatus``: the status of each phase (FRONTEND/BACKEND/UI)
- ``ProjectStatusHistory``: append-only audit log of ``project_status``
  transitions, one row per ``update_status`` call

Status rules
~~~~~~~~~~~~
- ``project_status`` is a flat enum with no transition graph.
- ``delivery_date`` is stamped whenever the status becomes ``DELIVERED`` and
  is never cleared afterwards.
"""

from teamhub.database.config.connection_engine import declarativeBase
from teamhub.database.entities.enums import Phase, PhaseStatus, Priority, ProjectStatus, ProjectType
from teamhub.database.helpers.timeutils import utcnow
from sqlalchemy import ForeignKey, DateTime, Enum, Numeric, TEXT, VARCHAR, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
from decimal import Decimal
import uuid
from datetime import datetime


class Project(declarativeBase):
    """
    ORM model for the `project` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    name, description : str
        Human-readable identification.
    type : ProjectType
        Decides which phases the project runs through.
    priority : Priority
        Scheduling hint shown on the dashboard.
    price : Decimal | None
        Contract value.
    deadline : datetime
        Due date; the deadline checker alerts 4 days and 1 day before it.
    project_status : ProjectStatus
        Current status. Changed only through the status history engine.
    delivery_date : datetime | None
        Set when the status transitions to DELIVERED.
    creation_month : str
        ``YYYY-MM`` bucket used by the monthly project views; a duplicated
        project gets the month it is copied into.
    team_id : UUID
        Owning team.
    """

    __tablename__ = "project"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    type: Mapped[ProjectType] = mapped_column(Enum(ProjectType, name="project_type"), nullable=False)
    priority: Mapped[Priority] = mapped_column(Enum(Priority, name="priority"), nullable=False, default=Priority.MEDIUM)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    project_status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status"), nullable=False, default=ProjectStatus.NOT_STARTED
    )
    delivery_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    creation_month: Mapped[str] = mapped_column(VARCHAR(7), nullable=False, index=True)
    team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("team.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    assignments = relationship("ProjectAssignment", back_populates="project", order_by="ProjectAssignment.created_at")
    phase_statuses = relationship("ProjectPhaseStatus", back_populates="project", order_by="ProjectPhaseStatus.phase")

    def __str__(self) -> str:
        return f"Project: id:{self.id}, name: {self.name}, status: {self.project_status}"


class ProjectAssignment(declarativeBase):
    """A user working on one phase of a project. A user holds one row per (project, phase)."""

    __tablename__ = "project_assignment"
    __table_args__ = (UniqueConstraint("project_id", "user_id", "phase", name="uq_project_assignment"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("project.id"), nullable=False, index=True)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False, index=True)
    phase: Mapped[Phase] = mapped_column(Enum(Phase, name="phase"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project", back_populates="assignments")
    user = relationship("User")


class ProjectPhaseStatus(declarativeBase):
    __tablename__ = "project_phase_status"
    __table_args__ = (UniqueConstraint("project_id", "phase", name="uq_project_phase_status"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("project.id"), nullable=False, index=True)
    phase: Mapped[Phase] = mapped_column(Enum(Phase, name="phase"), nullable=False)
    status: Mapped[PhaseStatus] = mapped_column(
        Enum(PhaseStatus, name="phase_status"), nullable=False, default=PhaseStatus.STARTED
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="phase_statuses")


class ProjectStatusHistory(declarativeBase):
    """
    ORM model for the `project_status_history` table.

    Append-only: rows are inserted by ``update_status`` and never updated.

    Attributes
    ----------
    old_status : ProjectStatus
        Status read from the project immediately before the change.
    new_status : ProjectStatus
        Status requested by the actor (may equal ``old_status``).
    comment : str | None
        Free-text justification supplied by the actor.
    updated_by_id : UUID
        The acting user.
    """

    __tablename__ = "project_status_history"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("project.id"), nullable=False, index=True)
    old_status: Mapped[ProjectStatus] = mapped_column(Enum(ProjectStatus, name="project_status"), nullable=False)
    new_status: Mapped[ProjectStatus] = mapped_column(Enum(ProjectStatus, name="project_status"), nullable=False)
    comment: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    updated_by_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    updated_by = relationship("User")
