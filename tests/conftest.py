import os
from datetime import timedelta

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INIT_MODE"] = "test"
os.environ["SPACES_ENDPOINT"] = "https://nyc3.digitaloceanspaces.test"
os.environ["BUCKET_NAME"] = "teamhub-test"

import pytest

from teamhub.database import entities  # noqa: F401
from teamhub.database.config.connection_engine import connection_engine, metadata
from teamhub.database.core import projects, users
from teamhub.database.entities.enums import ProjectType, UserRole
from teamhub.database.helpers.timeutils import utcnow


@pytest.fixture(autouse=True)
def database():
    metadata.create_all(connection_engine)
    yield
    metadata.drop_all(connection_engine)


@pytest.fixture
def leader():
    return users.register_team(team_name="Falcon", name="Lena", email="lena@falcon.test", password="pw-lena")


@pytest.fixture
def member(leader):
    return users.create_member(
        team_id=leader.team_id, name="Marco", email="marco@falcon.test", password="pw-marco", role=UserRole.MEMBER
    )


@pytest.fixture
def third_member(leader):
    return users.create_member(team_id=leader.team_id, name="Nia", email="nia@falcon.test", password="pw-nia")


@pytest.fixture
def outsider():
    return users.register_team(team_name="Otter", name="Omar", email="omar@otter.test", password="pw-omar")


@pytest.fixture
def project(leader):
    return projects.create_project(
        team_id=leader.team_id,
        name="Website",
        type=ProjectType.FULL_STACK,
        deadline=utcnow() + timedelta(days=30),
    )

