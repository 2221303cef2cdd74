"""
Service-layer operations for teams, users, departments and presence.

Token issuing stays in the API layer (`teamhub.api.utils`); the functions
here only validate credentials and return read models.

Accounts reach a team in two ways: a leader creates them (approved at once)
or the user registers against the team name and waits in the approval queue
until a leader approves or rejects them.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from teamhub.api.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from teamhub.api.models import DepartmentRead, PendingUserRead, TeamRead, UserRead, UserStatusChange
from teamhub.crypt.passwords import PasswordHasher
from teamhub.database.daos.notification_dao import NotificationDao
from teamhub.database.daos.team_dao import TeamDao
from teamhub.database.daos.user_dao import UserDao
from teamhub.database.entities.enums import NotificationType, UserRole
from teamhub.database.entities.notification import Notification
from teamhub.database.entities.team import Department, Team
from teamhub.database.entities.user import User
from teamhub.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@transactional
def register_team(session: Session, team_name: str, name: str, email: str, password: str) -> UserRead:
    """
    Create a team and its leader account.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    team_name : str
        Name of the new team.
    name, email, password : str
        Leader account; the password is hashed by the DAO.

    Returns
    -------
    UserRead
        The leader.

    Raises
    ------
    BadRequest
        If the e-mail or the team name is already registered.
    """
    user_dao = UserDao()
    team_dao = TeamDao()
    if len(user_dao.fetchUserByEmail(session, email)) > 0:
        raise BadRequest("Email already exists")
    if team_dao.fetchTeamByName(session, team_name) is not None:
        raise BadRequest("Team name already exists")

    team = team_dao.createTeam(session, Team(name=team_name))
    leader = user_dao.createUser(
        session,
        User(
            name=name,
            email=email,
            password=password,
            team_id=team.id,
            role=UserRole.LEADER,
            is_team_leader=True,
        ),
    )
    logger.info("team.registered id=%s leader=%s", team.id, leader.id)
    return UserRead.model_validate(leader)


@transactional
def login_user(session: Session, email: str, password: str) -> UserRead:
    """
    Authenticate a user by e-mail and password.

    Raises
    ------
    Unauthorized
        If no user has that e-mail or the password does not match. The two
        cases share one message.
    Forbidden
        If the credentials are valid but the account still awaits approval.
    """
    users_fetched = UserDao().fetchUserByEmail(session, email)
    if len(users_fetched) == 0 or not PasswordHasher().check_passwords(password, users_fetched[0].password):
        raise Unauthorized("Invalid email or password")
    if not users_fetched[0].is_approved:
        raise Forbidden("Your account is pending approval from the team leader")
    return UserRead.model_validate(users_fetched[0])


@transactional
def create_member(
    session: Session,
    team_id: UUID,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.MEMBER,
    department_id: UUID | None = None,
) -> UserRead:
    """
    Create an account inside an existing team.

    Raises
    ------
    NotFound
        If the team does not exist.
    BadRequest
        If the e-mail is taken or the department belongs to another team.
    """
    team_dao = TeamDao()
    user_dao = UserDao()
    if team_dao.fetchTeamById(session, team_id) is None:
        raise NotFound("Team not found")
    if len(user_dao.fetchUserByEmail(session, email)) > 0:
        raise BadRequest("Email already exists")
    if department_id is not None:
        department = session.get(Department, department_id)
        if department is None or department.team_id != team_id:
            raise BadRequest("Department does not belong to the team")

    user = user_dao.createUser(
        session,
        User(name=name, email=email, password=password, team_id=team_id, role=role, department_id=department_id),
    )
    return UserRead.model_validate(user)


@transactional
def get_user(session: Session, user_id: UUID) -> UserRead:
    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return UserRead.model_validate(user)


@transactional
def get_team_members(session: Session, team_id: UUID) -> list[UserRead]:
    if TeamDao().fetchTeamById(session, team_id) is None:
        raise NotFound("Team not found")
    return [UserRead.model_validate(u) for u in UserDao().fetchUsersByTeamId(session, team_id)]


@transactional
def get_team(session: Session, team_id: UUID) -> TeamRead:
    team = TeamDao().fetchTeamById(session, team_id)
    if team is None:
        raise NotFound("Team not found")
    return TeamRead.model_validate(team)


@transactional
def set_online_status(
    session: Session, user_id: UUID, is_online: bool, last_seen: datetime
) -> tuple[UserStatusChange, UUID]:
    """
    Persist a presence change.

    Returns
    -------
    tuple[UserStatusChange, UUID]
        The change as broadcast to the team, and the user's team id.

    Raises
    ------
    NotFound
        If the user does not exist.
    """
    user_dao = UserDao()
    if user_dao.fetchUserById(session, user_id) is None:
        raise NotFound("User not found")
    user = user_dao.updateOnlineStatus(session, user_id, is_online, last_seen)
    session.flush()
    change = UserStatusChange(user_id=user.id, is_online=user.is_online, last_seen=user.last_seen)
    return change, user.team_id


@transactional
def create_department(session: Session, team_id: UUID, name: str) -> DepartmentRead:
    team_dao = TeamDao()
    if team_dao.fetchTeamById(session, team_id) is None:
        raise NotFound("Team not found")
    if any(d.name == name for d in team_dao.fetchDepartmentsByTeamId(session, team_id)):
        raise BadRequest("Department already exists")
    department = team_dao.createDepartment(session, Department(name=name, team_id=team_id))
    return DepartmentRead.model_validate(department)


@transactional
def get_departments(session: Session, team_id: UUID) -> list[DepartmentRead]:
    return [DepartmentRead.model_validate(d) for d in TeamDao().fetchDepartmentsByTeamId(session, team_id)]


@transactional
def register_individual(
    session: Session, team_name: str, name: str, email: str, password: str, department_name: str | None = None
) -> UserRead:
    """
    Register an account into an existing team, pending the leader's approval.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    team_name : str
        Name of the team to join.
    name, email, password : str
        Account data; the password is hashed by the DAO.
    department_name : str | None
        Optional department of that team, by name.

    Returns
    -------
    UserRead
        The new account with ``is_approved=False``.

    Raises
    ------
    BadRequest
        If the e-mail is already registered.
    NotFound
        If the team, or the named department inside it, does not exist.
    """
    user_dao = UserDao()
    team_dao = TeamDao()
    if len(user_dao.fetchUserByEmail(session, email)) > 0:
        raise BadRequest("User already exists")
    team = team_dao.fetchTeamByName(session, team_name)
    if team is None:
        raise NotFound("Team not found")

    department_id = None
    if department_name:
        department = team_dao.fetchDepartment(session, team.id, name=department_name)
        if department is None:
            raise NotFound("Department not found in the specified team")
        department_id = department.id

    user = user_dao.createUser(
        session,
        User(
            name=name,
            email=email,
            password=password,
            team_id=team.id,
            department_id=department_id,
            is_approved=False,
        ),
    )
    logger.info("user.registered id=%s team=%s pending=True", user.id, team.id)
    return UserRead.model_validate(user)


@transactional
def get_pending_users(session: Session, team_id: UUID) -> list[PendingUserRead]:
    return [PendingUserRead.model_validate(u) for u in UserDao().fetchPendingUsersByTeamId(session, team_id)]


def _team_user(session: Session, user_id: UUID, team_id: UUID) -> User:
    user = UserDao().fetchUserById(session, user_id)
    if user is None or user.team_id != team_id:
        raise NotFound("User not found in your team")
    return user


@transactional
def approve_user(session: Session, user_id: UUID, team_id: UUID) -> UserRead:
    """
    Approve a pending account of the team and notify its owner.

    Raises
    ------
    NotFound
        If the user does not exist in the team.
    BadRequest
        If the account is already approved.
    """
    user = _team_user(session, user_id, team_id)
    if user.is_approved:
        raise BadRequest("User is already approved")

    user.is_approved = True
    NotificationDao().createNotification(
        session,
        Notification(
            title="Account Approved",
            content="Your account has been approved. You can now log in.",
            type=NotificationType.APPROVAL,
            user_id=user.id,
        ),
    )
    session.flush()
    logger.info("user.approved id=%s team=%s", user.id, team_id)
    return UserRead.model_validate(user)


@transactional
def reject_user(session: Session, user_id: UUID, team_id: UUID) -> None:
    """
    Remove a pending account.

    Raises
    ------
    NotFound
        If the user does not exist in the team.
    BadRequest
        If the account has already been approved.
    """
    user = _team_user(session, user_id, team_id)
    if user.is_approved:
        raise BadRequest("Cannot reject an already approved user")
    UserDao().deleteUser(session, user)
    logger.info("user.rejected id=%s team=%s", user_id, team_id)


@transactional
def update_user_role(
    session: Session, user_id: UUID, team_id: UUID, role: UserRole, department_id: UUID | None = None
) -> UserRead:
    """
    Change the role, and optionally the department, of a team member.

    Raises
    ------
    NotFound
        If the user or the department does not exist in the team.
    """
    user = _team_user(session, user_id, team_id)
    if department_id is not None:
        if TeamDao().fetchDepartment(session, team_id, department_id=department_id) is None:
            raise NotFound("Department not found or does not belong to your team")
        user.department_id = department_id
    user.role = role
    session.flush()
    return UserRead.model_validate(user)


@transactional
def delete_user(session: Session, user_id: UUID, team_id: UUID) -> None:
    """
    Delete a member of the team.

    Raises
    ------
    NotFound
        If the user does not exist in the team.
    BadRequest
        If the user is the team leader.
    Conflict
        If the user has recorded project status changes; that log is kept.
    """
    user_dao = UserDao()
    user = _team_user(session, user_id, team_id)
    if user.is_team_leader:
        raise BadRequest("Cannot delete the team leader")
    if user_dao.hasStatusHistory(session, user.id):
        raise Conflict("User has recorded project status changes and cannot be deleted")
    user_dao.deleteUser(session, user)
    logger.info("user.deleted id=%s team=%s", user_id, team_id)
