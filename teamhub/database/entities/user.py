"""
User ORM Model
==============

The ``User`` ORM model represents a member of a team. It maps to the
``app_user`` table and carries authentication, role and presence data.

Key features
~~~~~~~~~~~~
- UUID primary key (``id``)
- Unique e-mail used as the login name, bcrypt-hashed password
- Role (``LEADER`` / ``MEMBER``) and the ``is_team_leader`` flag
- Presence: ``is_online`` and ``last_seen``, the only fields the real-time
  layer mutates
- Exactly one owning team (``team_id``), optional department
- Approval: self-registered accounts start with ``is_approved=False`` and
  cannot log in until a team leader approves them
"""

from teamhub.database.config.connection_engine import declarativeBase
from teamhub.database.entities.enums import UserRole
from teamhub.database.helpers.timeutils import utcnow
from sqlalchemy import VARCHAR, Boolean, TEXT, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime

class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    name : str
        Display name.
    email : str
        Unique e-mail address, used to log in.
    password : str
        bcrypt hash of the password.
    role : UserRole
        ``LEADER`` or ``MEMBER``; leader-only endpoints check this.
    is_team_leader : bool
        Marks the team's leader; deadline alerts are addressed to this user.
    is_online : bool
        True while the user holds at least one live real-time connection.
    last_seen : datetime | None
        Last presence change (UTC).
    team_id : UUID
        Owning team.
    department_id : UUID | None
        Optional department inside the team.
    photo : str | None
        Optional avatar URL.
    is_approved : bool
        False for self-registered accounts awaiting a leader's approval.
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    """Primary key. UUID of the user."""

    name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    """Display name of the user (max length 255)."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """E-mail address of the user (max length 255, unique)."""

    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Hashed password of the user."""

    role: Mapped[UserRole] = mapped_column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.MEMBER)
    """Role assigned to the user."""

    is_team_leader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    last_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    photo: Mapped[str | None] = mapped_column(TEXT, nullable=True)

    team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("team.id"), nullable=False, index=True)
    """Foreign key reference to the owning team."""

    department_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("department.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    team = relationship("Team", back_populates="users")

    def __init__(
        self,
        name: str,
        email: str,
        password: str,
        team_id: UUID,
        role: UserRole = UserRole.MEMBER,
        is_team_leader: bool = False,
        department_id: UUID | None = None,
        photo: str | None = None,
        is_approved: bool = True,
    ):
        """
        Initialize a new User object.

        Parameters
        ----------
        name : str
            Display name of the user.
        email : str
            Login e-mail of the user.
        password : str
            Already hashed password.
        team_id : UUID
            Owning team.
        role : UserRole, optional
            Defaults to ``MEMBER``.
        is_team_leader : bool, optional
            Defaults to False.
        department_id : UUID | None, optional
            Department inside the team.
        photo : str | None, optional
            Avatar URL.
        is_approved : bool, optional
            Defaults to True; self-registration passes False.
        """
        self.id = uuid.uuid4()
        self.name = name
        self.email = email
        self.password = password
        self.team_id = team_id
        self.role = role
        self.is_team_leader = is_team_leader
        self.is_online = False
        self.last_seen = None
        self.department_id = department_id
        self.photo = photo
        self.is_approved = is_approved

    def __str__(self) -> str:
        return f"User: id:{self.id}, name: {self.name}, email: {self.email}, team: {self.team_id}"
