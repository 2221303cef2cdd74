"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation with password hashing
- Lookup by id, by e-mail and by team
- Presence queries and updates (online users, online flag + last seen)
- Team-leader lookup used by the deadline checker
- Approval queue (pending users of a team)
- Account removal together with the rows that only make sense for that user

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Business logic (validation, authorization, transactions) lives in
  `teamhub.database.core`; the DAO focuses on persistence operations.
- Passwords are hashed using `PasswordHasher.hash_password(...)` before insert.

Error Handling
--------------
- Methods log the failing call and re-raise; callers decide the error policy.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.orm import Session

from teamhub.crypt.passwords import PasswordHasher
from teamhub.database.entities.chat import ChatRoomMember, Message, MessageSeen
from teamhub.database.entities.note import Note, NoteHistory
from teamhub.database.entities.notification import Notification
from teamhub.database.entities.project import ProjectAssignment, ProjectStatusHistory
from teamhub.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> User:
        """
        Create a new user in the database with a hashed password.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity whose `password` still holds the plaintext.

        Returns
        -------
        User
            The staged user, flushed so that its id is usable.

        Raises
        ------
        Exception
            If hashing or insertion fails.
        """
        try:
            hasher = PasswordHasher()
            user_data.password = hasher.hash_password(user_data.password)
            session.add(user_data)
            session.flush()
            return user_data
        except Exception as e:
            logger.error("Error in UserDao.createUser. Error Message: %s", e)
            raise e

    def fetchUserById(self, session: Session, user_id: UUID) -> User | None:
        return session.get(User, user_id)

    def fetchUserByEmail(self, session: Session, email: str) -> list[User]:
        """
        Fetch a user by email.

        Returns
        -------
        list[User]
            A list containing the matching user (at most one).
        """
        try:
            return session.query(User).filter(User.email == email).limit(1).all()
        except Exception as e:
            logger.error("Error in UserDao.fetchUserByEmail. Error Message: %s", e)
            raise e

    def fetchUsersByTeamId(self, session: Session, team_id: UUID) -> list[User]:
        """Approved members of a team, ordered by name."""
        return (
            session.query(User)
            .filter(User.team_id == team_id, User.is_approved.is_(True))
            .order_by(User.name)
            .all()
        )

    def fetchPendingUsersByTeamId(self, session: Session, team_id: UUID) -> list[User]:
        return (
            session.query(User)
            .filter(User.team_id == team_id, User.is_approved.is_(False))
            .order_by(desc(User.created_at))
            .all()
        )

    def countUsersByTeamId(self, session: Session, team_id: UUID) -> int:
        return session.scalar(
            select(func.count(User.id)).where(User.team_id == team_id, User.is_approved.is_(True))
        )

    def hasStatusHistory(self, session: Session, user_id: UUID) -> bool:
        return session.scalar(
            select(func.count(ProjectStatusHistory.id)).where(ProjectStatusHistory.updated_by_id == user_id)
        ) > 0

    def fetchOnlineUsersByTeamId(self, session: Session, team_id: UUID) -> list[User]:
        """
        Fetch the users of a team whose `is_online` flag is set.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        team_id : UUID
            Team to inspect.

        Returns
        -------
        list[User]
            Online users ordered by name.
        """
        try:
            return (
                session.query(User)
                .filter(User.team_id == team_id)
                .filter(User.is_online.is_(True))
                .order_by(User.name)
                .all()
            )
        except Exception as e:
            logger.error("Error in UserDao.fetchOnlineUsersByTeamId. Error Message: %s", e)
            raise e

    def fetchTeamLeaders(self, session: Session, team_id: UUID) -> list[User]:
        return (
            session.query(User)
            .filter(User.team_id == team_id)
            .filter(User.is_team_leader.is_(True))
            .all()
        )

    def updateOnlineStatus(self, session: Session, user_id: UUID, is_online: bool, last_seen: datetime) -> User:
        """
        Set the presence fields of a user.

        Raises
        ------
        sqlalchemy.exc.NoResultFound
            If the user does not exist.
        """
        try:
            user = session.query(User).filter(User.id == user_id).one()
            user.is_online = is_online
            user.last_seen = last_seen
            return user
        except Exception as e:
            logger.error("Error in UserDao.updateOnlineStatus. Error Message: %s", e)
            raise e

    def deleteUser(self, session: Session, user: User) -> None:
        """
        Delete a user and the rows that belong to them alone.

        Removes the user's seen receipts, messages (with their receipts), room
        memberships, project assignments and notifications, and detaches the
        user from the notes they wrote. Status history rows are not touched;
        callers refuse to delete users that appear in it.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user : User
            The user to remove.
        """
        try:
            own_messages = select(Message.id).where(Message.sender_id == user.id)
            session.execute(delete(MessageSeen).where(MessageSeen.user_id == user.id))
            session.execute(delete(MessageSeen).where(MessageSeen.message_id.in_(own_messages)))
            session.execute(delete(Message).where(Message.sender_id == user.id))
            session.execute(delete(ChatRoomMember).where(ChatRoomMember.user_id == user.id))
            session.execute(delete(ProjectAssignment).where(ProjectAssignment.user_id == user.id))
            session.execute(delete(Notification).where(Notification.user_id == user.id))
            session.execute(update(Note).where(Note.created_by_id == user.id).values(created_by_id=None))
            session.execute(update(NoteHistory).where(NoteHistory.created_by_id == user.id).values(created_by_id=None))
            session.delete(user)
            session.flush()
        except Exception as e:
            logger.error("Error in UserDao.deleteUser. Error Message: %s", e)
            raise e
