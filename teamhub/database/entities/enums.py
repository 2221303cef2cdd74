"""
Enumerations shared by the ORM entities and the API models.

Every enum subclasses ``str`` so values serialize as plain strings in JSON
payloads and real-time events.
"""

import enum


class UserRole(str, enum.Enum):
    LEADER = "LEADER"
    MEMBER = "MEMBER"


class ProjectStatus(str, enum.Enum):
    """Project lifecycle. Any status may move to any other status."""

    NOT_STARTED = "NOT_STARTED"
    WIP = "WIP"
    CANCELLED = "CANCELLED"
    DISPUTE = "DISPUTE"
    DELIVERED = "DELIVERED"
    REVISION_DELIVERY = "REVISION_DELIVERY"


class ProjectType(str, enum.Enum):
    FULL_STACK = "FULL_STACK"
    FRONTEND_ONLY = "FRONTEND_ONLY"
    UI_ONLY = "UI_ONLY"


class Phase(str, enum.Enum):
    FRONTEND = "FRONTEND"
    BACKEND = "BACKEND"
    UI = "UI"


class PhaseStatus(str, enum.Enum):
    STARTED = "STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class NotificationType(str, enum.Enum):
    DEADLINE = "DEADLINE"
    GENERAL = "GENERAL"
    APPROVAL = "APPROVAL"


PHASES_BY_PROJECT_TYPE = {
    ProjectType.FULL_STACK: (Phase.FRONTEND, Phase.BACKEND, Phase.UI),
    ProjectType.FRONTEND_ONLY: (Phase.FRONTEND,),
    ProjectType.UI_ONLY: (Phase.UI,),
}
"""Phases that receive a status row when a project of the given type is created."""
