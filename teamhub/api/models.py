"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints or pushed
through the real-time channel. Field names are snake_case in Python and
camelCase on the wire (`alias_generator=to_camel`); payloads are produced with
``model_dump(mode="json", by_alias=True)``.

Read models are built with ``model_validate(entity)`` while the SQLAlchemy
session that loaded the entity is still open, so relationships can be
expanded (``members.user``, ``sender``, ``updated_by`` ...).
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from teamhub.database.entities.enums import (
    NotificationType,
    Phase,
    PhaseStatus,
    Priority,
    ProjectStatus,
    ProjectType,
    UserRole,
)
from teamhub.database.helpers.timeutils import as_utc

UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]
"""Datetime that is always timezone-aware once validated."""


class CamelModel(BaseModel):
    """Base for every contract: camelCase aliases, ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class TeamRegistration(CamelModel):
    """
    Registers a team together with its leader account.
    """
    team_name: str = Field(..., min_length=1, description="Name of the new team.", examples=["Falcon Studio"])
    name: str = Field(..., min_length=1, description="Display name of the leader.")
    email: str = Field(..., min_length=3, description="Login e-mail of the leader.")
    password: str = Field(..., min_length=1)


class UserCredentials(CamelModel):
    """
    Represents login credentials for a user.
    """
    email: str
    """The login e-mail of the user."""
    password: str
    """The plaintext password provided for authentication."""


class MemberCreation(CamelModel):
    """A leader creates an account inside their own team."""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    role: UserRole = UserRole.MEMBER
    department_id: UUID | None = None


class IndividualRegistration(CamelModel):
    """
    Self-registration into an existing team. The account waits for a team
    leader's approval before it can log in.
    """
    team_name: str = Field(..., min_length=1, description="Name of the team to join.")
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    department: str | None = Field(None, description="Name of a department of that team.")


class RoleUpdate(CamelModel):
    role: UserRole
    department_id: UUID | None = None


class DepartmentCreation(CamelModel):
    team_id: UUID
    name: str = Field(..., min_length=1)


class ChatRoomCreation(CamelModel):
    """
    Represents details needed to create a chat room. The creator is the
    authenticated user.
    """
    name: str = Field(..., min_length=1, description="Room name.", examples=["Dev"])
    team_id: UUID = Field(..., description="Team that owns the room.")


class MemberAddition(CamelModel):
    """Adds `user_id` to a room on behalf of the authenticated user."""
    chat_room_id: UUID
    user_id: UUID


class NewMessage(CamelModel):
    """
    Represents a new chat message. At least one of `content` and `image_file`
    must be present.
    """
    chat_room_id: UUID
    """The room the message is sent to."""
    content: str | None = None
    """The text of the message."""
    image_file: str | None = None
    """Optional image as a base64 string or `data:image/...;base64,` URL."""


class MessageSeenRequest(CamelModel):
    message_id: UUID


class NoteCreation(CamelModel):
    project_id: UUID
    content: str = Field(..., min_length=1)
    comment: str | None = None


class NoteUpdate(CamelModel):
    content: str = Field(..., min_length=1)
    comment: str | None = None


class StatusUpdate(CamelModel):
    """
    Requested project status change. `status` must be a `ProjectStatus` value;
    anything else is rejected with 400.
    """
    status: ProjectStatus
    comment: str | None = None


class AssignmentInput(CamelModel):
    user_id: UUID
    phase: Phase


class ProjectCreation(CamelModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    type: ProjectType
    priority: Priority = Priority.MEDIUM
    price: Decimal | None = None
    deadline: UtcDateTime
    assigned_users: list[AssignmentInput] = Field(default_factory=list)


class ProjectUpdate(CamelModel):
    """
    Partial update of the descriptive fields of a project. The type, the
    status and the delivery date have their own flows and are not accepted
    here.
    """
    name: str | None = Field(None, min_length=1)
    description: str | None = None
    priority: Priority | None = None
    price: Decimal | None = None
    deadline: UtcDateTime | None = None


class ProjectDuplication(CamelModel):
    project_id: UUID
    new_month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", examples=["2026-11"])


class AssignmentCreation(CamelModel):
    project_id: UUID
    user_id: UUID
    phase: Phase


class PhaseStatusUpdate(CamelModel):
    status: PhaseStatus


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

class UserSummary(CamelModel):
    """Compact user expansion used inside other payloads."""
    id: UUID
    name: str
    email: str
    photo: str | None = None


class UserRead(UserSummary):
    role: UserRole
    is_team_leader: bool
    is_approved: bool = True
    is_online: bool
    last_seen: UtcDateTime | None = None
    team_id: UUID
    department_id: UUID | None = None


class PendingUserRead(UserSummary):
    role: UserRole
    department_id: UUID | None = None
    created_at: UtcDateTime


class OnlineUser(UserSummary):
    last_seen: UtcDateTime | None = None


class TeamRead(CamelModel):
    id: UUID
    name: str
    created_at: UtcDateTime


class DepartmentRead(CamelModel):
    id: UUID
    name: str
    team_id: UUID


class UserAuthentication(CamelModel):
    """
    Returned by login and team registration.
    """
    token: str
    """Signed bearer token carrying `userId` and `teamId`."""
    user: UserRead


class ChatRoomMemberRead(CamelModel):
    id: UUID
    chat_room_id: UUID
    user_id: UUID
    can_add_members: bool
    joined_at: UtcDateTime
    user: UserRead


class MessageSeenRead(CamelModel):
    id: UUID
    message_id: UUID
    user_id: UUID
    seen_at: UtcDateTime
    user: UserSummary | None = None


class MessageRead(CamelModel):
    id: UUID
    content: str | None = None
    image_url: str | None = None
    image_key: str | None = None
    chat_room_id: UUID
    sender_id: UUID
    created_at: UtcDateTime
    sender: UserSummary
    seen_by: list[MessageSeenRead] = Field(default_factory=list)


class ChatRoomRead(CamelModel):
    id: UUID
    name: str
    team_id: UUID
    created_at: UtcDateTime
    members: list[ChatRoomMemberRead] = Field(default_factory=list)
    latest_message: MessageRead | None = None


class NoteRead(CamelModel):
    id: UUID
    content: str
    version: int
    project_id: UUID
    created_by_id: UUID | None = None
    comment: str | None = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class NoteHistoryRead(CamelModel):
    id: UUID
    content: str
    version: int
    note_id: UUID
    created_by_id: UUID | None = None
    comment: str | None = None
    created_at: UtcDateTime


class NoteHistoryView(CamelModel):
    """The current version of a note and its archived versions, newest first."""
    current: NoteRead
    history: list[NoteHistoryRead]


class StatusHistoryRead(CamelModel):
    id: UUID
    project_id: UUID
    old_status: ProjectStatus
    new_status: ProjectStatus
    comment: str | None = None
    updated_by_id: UUID
    created_at: UtcDateTime
    updated_by: UserSummary | None = None


class PhaseStatusRead(CamelModel):
    phase: Phase
    status: PhaseStatus
    updated_at: UtcDateTime


class AssignmentRead(CamelModel):
    id: UUID
    project_id: UUID
    user_id: UUID
    phase: Phase
    user: UserSummary


class ProjectRead(CamelModel):
    id: UUID
    name: str
    description: str | None = None
    type: ProjectType
    priority: Priority
    price: Decimal | None = None
    deadline: UtcDateTime
    project_status: ProjectStatus
    delivery_date: UtcDateTime | None = None
    creation_month: str
    team_id: UUID
    created_at: UtcDateTime
    phase_statuses: list[PhaseStatusRead] = Field(default_factory=list)
    assignments: list[AssignmentRead] = Field(default_factory=list)


class ProjectStatusView(ProjectRead):
    """Project after a status change, with its five most recent transitions."""
    status_history: list[StatusHistoryRead] = Field(default_factory=list)


class DashboardMember(CamelModel):
    id: UUID
    name: str
    role: UserRole


class DashboardProject(CamelModel):
    id: UUID
    name: str
    type: ProjectType
    deadline: UtcDateTime
    project_status: ProjectStatus
    assigned_users: list[DashboardMember] = Field(default_factory=list)


class DashboardStats(CamelModel):
    """Counters and the five newest projects shown on the dashboard."""
    total_members: int
    active_projects: int
    pending_notifications: int
    pending_approvals: int = 0
    recent_projects: list[DashboardProject] = Field(default_factory=list)


class NotificationRead(CamelModel):
    id: UUID
    title: str
    content: str
    type: NotificationType
    is_read: bool
    user_id: UUID
    created_at: UtcDateTime


# ---------------------------------------------------------------------------
# Real-time payloads
# ---------------------------------------------------------------------------

class UserStatusChange(CamelModel):
    user_id: UUID
    is_online: bool
    last_seen: UtcDateTime | None = None


class DeadlineAlert(CamelModel):
    project_id: UUID
    project_name: str
    days_left: int
    deadline: UtcDateTime
    team_id: UUID = Field(..., exclude=True)
