"""
Team DAO

Purpose
-------
Data-access layer for `Team` and `Department`:
- Create teams and departments
- Fetch a team by id or by name, list the departments of a team

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from teamhub.database.entities.team import Department, Team

logger = logging.getLogger(__name__)


class TeamDao:
    """
    Data Access Object (DAO) for Team and Department entities.
    """

    def createTeam(self, session: Session, team: Team) -> Team:
        """
        Stage a new team and flush it so its id can be referenced.

        Raises
        ------
        Exception
            If the insert fails.
        """
        try:
            session.add(team)
            session.flush()
            return team
        except Exception as e:
            logger.error("Error in TeamDao.createTeam. Error: %s", e)
            raise e

    def fetchTeamById(self, session: Session, team_id: UUID) -> Team | None:
        return session.get(Team, team_id)

    def fetchTeamByName(self, session: Session, name: str) -> Team | None:
        return session.query(Team).filter(Team.name == name).one_or_none()

    def createDepartment(self, session: Session, department: Department) -> Department:
        try:
            session.add(department)
            session.flush()
            return department
        except Exception as e:
            logger.error("Error in TeamDao.createDepartment. Error: %s", e)
            raise e

    def fetchDepartmentsByTeamId(self, session: Session, team_id: UUID) -> list[Department]:
        return (
            session.query(Department)
            .filter(Department.team_id == team_id)
            .order_by(Department.name)
            .all()
        )

    def fetchDepartment(self, session: Session, team_id: UUID, department_id: UUID | None = None, name: str | None = None) -> Department | None:
        """
        Fetch a department of a team by id or by name.

        Returns
        -------
        Department | None
            The department, or None when the team has no such department.
        """
        query = session.query(Department).filter(Department.team_id == team_id)
        if department_id is not None:
            query = query.filter(Department.id == department_id)
        if name is not None:
            query = query.filter(Department.name == name)
        return query.one_or_none()
