import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from teamhub.api.errors import BadRequest, NotFound
from teamhub.api.models import AssignmentInput
from teamhub.database.core import projects
from teamhub.database.entities.enums import Phase, PhaseStatus, Priority, ProjectStatus, ProjectType
from teamhub.database.entities.project import ProjectStatusHistory
from teamhub.database.helpers.timeutils import utcnow
from teamhub.database.helpers.transactionManagement import SessionFactory


def _create(team_id, name, type=ProjectType.FULL_STACK, **kwargs):
    return projects.create_project(
        team_id=team_id, name=name, type=type, deadline=utcnow() + timedelta(days=10), **kwargs
    )


def test_new_project_is_filed_under_current_month(project):
    assert project.creation_month == utcnow().strftime("%Y-%m")


def test_list_filters(leader, outsider):
    shop = _create(leader.team_id, "Shop", priority=Priority.HIGH, description="Online store")
    blog = _create(leader.team_id, "Blog", type=ProjectType.UI_ONLY)
    _create(outsider.team_id, "Shop clone", priority=Priority.HIGH)

    assert [p.id for p in projects.list_projects(team_id=leader.team_id)] == [blog.id, shop.id]
    assert [p.id for p in projects.list_projects(team_id=leader.team_id, priority=Priority.HIGH)] == [shop.id]
    assert [p.id for p in projects.list_projects(team_id=leader.team_id, search="STORE")] == [shop.id]
    assert projects.list_projects(team_id=leader.team_id, month="1999-01") == []


def test_update_descriptive_fields(leader, outsider, project):
    updated = projects.update_project(
        project_id=project.id, team_id=leader.team_id, name="Website v2", price=Decimal("1200.00")
    )
    assert updated.name == "Website v2"
    assert updated.price == Decimal("1200.00")
    assert updated.type == ProjectType.FULL_STACK

    with pytest.raises(BadRequest, match="project_status"):
        projects.update_project(project_id=project.id, team_id=leader.team_id, project_status=ProjectStatus.DELIVERED)
    with pytest.raises(BadRequest, match="name cannot be empty"):
        projects.update_project(project_id=project.id, team_id=leader.team_id, name=None)
    with pytest.raises(NotFound):
        projects.update_project(project_id=project.id, team_id=outsider.team_id, name="Mine")


def test_projects_by_phase_only_show_that_phase(leader, member, third_member):
    full = _create(
        leader.team_id,
        "Portal",
        assigned_users=[
            AssignmentInput(user_id=member.id, phase=Phase.BACKEND),
            AssignmentInput(user_id=third_member.id, phase=Phase.UI),
        ],
    )
    ui = _create(leader.team_id, "Mockups", type=ProjectType.UI_ONLY)
    _create(leader.team_id, "Landing", type=ProjectType.FRONTEND_ONLY)

    backend = projects.get_projects_by_phase(team_id=leader.team_id, phase=Phase.BACKEND)
    assert [p.id for p in backend] == [full.id]
    assert [a.user_id for a in backend[0].assignments] == [member.id]

    assert {p.id for p in projects.get_projects_by_phase(team_id=leader.team_id, phase=Phase.UI)} == {full.id, ui.id}


def test_user_projects(leader, member, project):
    other = _create(leader.team_id, "Other")
    projects.assign_user(project_id=project.id, user_id=member.id, phase=Phase.FRONTEND)
    projects.assign_user(project_id=project.id, user_id=member.id, phase=Phase.BACKEND)

    assert [p.id for p in projects.get_user_projects(user_id=member.id)] == [project.id]
    assert other.id not in [p.id for p in projects.get_user_projects(user_id=member.id)]
    with pytest.raises(NotFound):
        projects.get_user_projects(user_id=uuid.uuid4())


def test_duplicate_starts_fresh_in_new_month(leader, member, outsider, project):
    projects.assign_user(project_id=project.id, user_id=member.id, phase=Phase.BACKEND)
    projects.update_phase_status(project_id=project.id, phase=Phase.BACKEND, status=PhaseStatus.COMPLETED)
    projects.update_status(project_id=project.id, status=ProjectStatus.DELIVERED, updated_by_id=leader.id)

    copy = projects.duplicate_project(project_id=project.id, team_id=leader.team_id, new_month="2031-02")
    assert copy.id != project.id
    assert copy.name == project.name
    assert copy.creation_month == "2031-02"
    assert copy.project_status == ProjectStatus.NOT_STARTED
    assert copy.delivery_date is None
    assert {s.status for s in copy.phase_statuses} == {PhaseStatus.STARTED}
    assert [(a.user_id, a.phase) for a in copy.assignments] == [(member.id, Phase.BACKEND)]
    with SessionFactory() as session:
        assert session.query(ProjectStatusHistory).filter(ProjectStatusHistory.project_id == copy.id).count() == 0

    assert [p.id for p in projects.get_projects_by_month(team_id=leader.team_id, month="2031-02")] == [copy.id]
    with pytest.raises(NotFound):
        projects.duplicate_project(project_id=project.id, team_id=outsider.team_id, new_month="2031-02")
