"""
FastAPI dependencies: bearer authentication, role checks and access to the
application-scoped real-time services.
"""

from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from teamhub.api.errors import Forbidden, Unauthorized
from teamhub.api.models import UserRead
from teamhub.api.utils import verify_token
from teamhub.database.core import users
from teamhub.database.entities.enums import UserRole
from teamhub.realtime.fanout import ChatFanout

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> UserRead:
    """
    Resolve the caller from the ``Authorization: Bearer <jwt>`` header.

    Raises
    ------
    Unauthorized
        If the header is missing or the token is invalid or expired.
    NotFound
        If the token's user no longer exists.
    """
    if credentials is None:
        raise Unauthorized()
    claims = verify_token(credentials.credentials)
    if claims is None:
        raise Unauthorized("Invalid or expired token")
    try:
        user_id = UUID(str(claims["userId"]))
    except ValueError:
        raise Unauthorized("Invalid or expired token")
    return users.get_user(user_id=user_id)


def require_leader(user: UserRead = Depends(get_current_user)) -> UserRead:
    if user.role != UserRole.LEADER:
        raise Forbidden("Only team leaders can perform this action")
    return user


def ensure_same_team(user: UserRead, team_id: UUID) -> None:
    if user.team_id != team_id:
        raise Forbidden("You do not belong to this team")


def get_chat(request: Request) -> ChatFanout:
    return request.app.state.chat
