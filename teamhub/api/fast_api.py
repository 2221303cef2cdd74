"""
FastAPI Router — Teams • Users • Departments • Notifications
============================================================

Purpose
-------
Defines the HTTP API for:
- Team registration (team + leader account) and team member listing
- Authentication: login returning a bearer JWT, current-user lookup
- Leader-only account creation inside the leader's team
- Self-registration into an existing team and the leader's approval queue
- Leader-only role changes and account deletion
- Dashboard counters
- Departments: create, list
- Notifications: list, mark one read, mark all read

Key Notes
---------
- Input validation via Pydantic models in `teamhub.api.models`.
- Auth: ``Authorization: Bearer <jwt>``; the token carries ``userId`` and
  ``teamId`` (see `teamhub.api.utils`).
- Every response uses the envelope built by `teamhub.api.response.send_response`.
- Handlers catch nothing; typed errors are rendered by the handlers
  registered in `teamhub.main`.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from teamhub.api.deps import ensure_same_team, get_current_user, require_leader
from teamhub.api.errors import Forbidden
from teamhub.api.models import (
    DepartmentCreation,
    IndividualRegistration,
    MemberCreation,
    RoleUpdate,
    TeamRegistration,
    UserAuthentication,
    UserCredentials,
    UserRead,
)
from teamhub.api.response import send_response
from teamhub.api.utils import create_access_token
from teamhub.database.core import dashboard, notifications, users

router = APIRouter()
"""Creates the FastAPI router for team, user and notification routes"""


def _authenticate(user: UserRead) -> UserAuthentication:
    token = create_access_token({"userId": user.id, "teamId": user.team_id})
    return UserAuthentication(token=token, user=user)


@router.post("/teams/register")
def register_team(data: TeamRegistration):
    """Create a team with its leader and return a token for the leader.

    Response:
        201: UserAuthentication {token, user}
        400: e-mail already registered
    """
    leader = users.register_team(team_name=data.team_name, name=data.name, email=data.email, password=data.password)
    return send_response(_authenticate(leader), "Team registered successfully", status.HTTP_201_CREATED)


@router.get("/teams/{team_id}/members")
def team_members(team_id: UUID, user: UserRead = Depends(get_current_user)):
    ensure_same_team(user, team_id)
    return send_response(users.get_team_members(team_id=team_id), "Team members retrieved successfully")


@router.post("/users/login")
def login(data: UserCredentials):
    """Verify credentials and issue a bearer token.

    Response:
        200: UserAuthentication {token, user}
        401: unknown e-mail or wrong password
        403: account waiting for approval
    """
    user = users.login_user(email=data.email, password=data.password)
    return send_response(_authenticate(user), "User logged in successfully")


@router.post("/users/register")
def register_individual(data: IndividualRegistration):
    """Join an existing team. The account cannot log in until a leader approves it.

    Response:
        201: UserRead with isApproved=false
        400: e-mail already registered
        404: unknown team or department
    """
    user = users.register_individual(
        team_name=data.team_name,
        name=data.name,
        email=data.email,
        password=data.password,
        department_name=data.department,
    )
    return send_response(user, "Registration submitted, waiting for team leader approval", status.HTTP_201_CREATED)


@router.get("/users/me")
def me(user: UserRead = Depends(get_current_user)):
    return send_response(user, "User retrieved successfully")


@router.post("/users/create-by-leader")
def create_by_leader(data: MemberCreation, leader: UserRead = Depends(require_leader)):
    """Create an account inside the leader's own team."""
    member = users.create_member(
        team_id=leader.team_id,
        name=data.name,
        email=data.email,
        password=data.password,
        role=data.role,
        department_id=data.department_id,
    )
    return send_response(member, "User created successfully", status.HTTP_201_CREATED)


@router.get("/users/pending")
def pending_users(leader: UserRead = Depends(require_leader)):
    return send_response(users.get_pending_users(team_id=leader.team_id), "Pending users retrieved successfully")


@router.patch("/users/{user_id}/approve")
def approve_user(user_id: UUID, leader: UserRead = Depends(require_leader)):
    user = users.approve_user(user_id=user_id, team_id=leader.team_id)
    return send_response(user, "User approved successfully")


@router.delete("/users/{user_id}/reject")
def reject_user(user_id: UUID, leader: UserRead = Depends(require_leader)):
    users.reject_user(user_id=user_id, team_id=leader.team_id)
    return send_response(None, "User rejected successfully")


@router.patch("/users/{user_id}/role")
def update_role(user_id: UUID, data: RoleUpdate, leader: UserRead = Depends(require_leader)):
    user = users.update_user_role(
        user_id=user_id, team_id=leader.team_id, role=data.role, department_id=data.department_id
    )
    return send_response(user, "User role updated successfully")


@router.delete("/users/{user_id}")
def delete_user(user_id: UUID, leader: UserRead = Depends(require_leader)):
    users.delete_user(user_id=user_id, team_id=leader.team_id)
    return send_response(None, "User deleted successfully")


@router.get("/dashboard/stats")
def dashboard_stats(user: UserRead = Depends(get_current_user)):
    return send_response(dashboard.get_dashboard_stats(user_id=user.id), "Dashboard stats retrieved successfully")


@router.post("/departments/create")
def create_department(data: DepartmentCreation, leader: UserRead = Depends(require_leader)):
    ensure_same_team(leader, data.team_id)
    department = users.create_department(team_id=data.team_id, name=data.name)
    return send_response(department, "Department created successfully", status.HTTP_201_CREATED)


@router.get("/departments/team/{team_id}")
def list_departments(team_id: UUID, user: UserRead = Depends(get_current_user)):
    ensure_same_team(user, team_id)
    return send_response(users.get_departments(team_id=team_id), "Departments retrieved successfully")


@router.get("/users/{user_id}/notifications")
def list_notifications(user_id: UUID, user: UserRead = Depends(get_current_user)):
    if user.id != user_id:
        raise Forbidden("You can only read your own notifications")
    return send_response(notifications.get_notifications(user_id=user_id), "Notifications retrieved successfully")


@router.patch("/notifications/{notification_id}/read")
def mark_notification_read(notification_id: UUID, user: UserRead = Depends(get_current_user)):
    notification = notifications.mark_notification_read(notification_id=notification_id, user_id=user.id)
    return send_response(notification, "Notification marked as read")


@router.patch("/users/{user_id}/notifications/read-all")
def mark_all_read(user_id: UUID, user: UserRead = Depends(get_current_user)):
    if user.id != user_id:
        raise Forbidden("You can only update your own notifications")
    updated = notifications.mark_all_notifications_read(user_id=user_id)
    return send_response({"updated": updated}, "All notifications marked as read")
