import uuid
from datetime import timedelta

import pytest

from teamhub.api.errors import BadRequest, NotFound
from teamhub.database.core import notes, projects
from teamhub.database.entities.enums import Phase, PhaseStatus, ProjectStatus, ProjectType
from teamhub.database.entities.note import NoteHistory
from teamhub.database.entities.project import ProjectStatusHistory
from teamhub.database.helpers.timeutils import utcnow
from teamhub.database.helpers.transactionManagement import SessionFactory


def _history_count(project_id):
    with SessionFactory() as session:
        return session.query(ProjectStatusHistory).filter(ProjectStatusHistory.project_id == project_id).count()


def test_each_update_appends_one_row_with_prior_status(project, leader):
    assert project.project_status == ProjectStatus.NOT_STARTED

    view = projects.update_status(project_id=project.id, status=ProjectStatus.WIP, updated_by_id=leader.id)
    assert view.project_status == ProjectStatus.WIP
    assert _history_count(project.id) == 1
    assert view.status_history[0].old_status == ProjectStatus.NOT_STARTED
    assert view.status_history[0].new_status == ProjectStatus.WIP
    assert view.status_history[0].updated_by.email == leader.email

    view = projects.update_status(
        project_id=project.id, status=ProjectStatus.DISPUTE, updated_by_id=leader.id, comment="client unhappy"
    )
    assert _history_count(project.id) == 2
    newest = max(view.status_history, key=lambda h: h.created_at)
    assert newest.old_status == ProjectStatus.WIP
    assert newest.comment == "client unhappy"


def test_same_status_is_still_recorded(project, leader):
    projects.update_status(project_id=project.id, status=ProjectStatus.NOT_STARTED, updated_by_id=leader.id)
    history = projects.get_status_history(project_id=project.id)
    assert len(history) == 1
    assert history[0].old_status == history[0].new_status == ProjectStatus.NOT_STARTED


def test_delivery_date_only_set_on_delivered(project, leader):
    view = projects.update_status(project_id=project.id, status=ProjectStatus.WIP, updated_by_id=leader.id)
    assert view.delivery_date is None

    view = projects.update_status(project_id=project.id, status=ProjectStatus.DELIVERED, updated_by_id=leader.id)
    delivered_at = view.delivery_date
    assert delivered_at is not None

    view = projects.update_status(
        project_id=project.id, status=ProjectStatus.REVISION_DELIVERY, updated_by_id=leader.id
    )
    assert view.delivery_date == delivered_at


def test_update_returns_five_most_recent_rows(project, leader):
    sequence = [ProjectStatus.WIP, ProjectStatus.DISPUTE, ProjectStatus.WIP, ProjectStatus.DELIVERED,
                ProjectStatus.REVISION_DELIVERY, ProjectStatus.DELIVERED, ProjectStatus.CANCELLED]
    for status in sequence:
        view = projects.update_status(project_id=project.id, status=status, updated_by_id=leader.id)

    assert len(view.status_history) == 5
    stamps = [h.created_at for h in view.status_history]
    assert stamps == sorted(stamps, reverse=True)
    assert len(projects.get_status_history(project_id=project.id)) == len(sequence)


def test_update_status_errors(leader):
    with pytest.raises(NotFound):
        projects.update_status(project_id=uuid.uuid4(), status=ProjectStatus.WIP, updated_by_id=leader.id)
    with pytest.raises(BadRequest):
        projects.update_status(project_id=None, status=ProjectStatus.WIP, updated_by_id=leader.id)


def test_status_history_for_missing_project():
    with pytest.raises(NotFound):
        projects.get_status_history(project_id=uuid.uuid4())


def test_phases_follow_project_type(leader):
    full = projects.create_project(
        team_id=leader.team_id, name="Full", type=ProjectType.FULL_STACK, deadline=utcnow() + timedelta(days=20)
    )
    ui = projects.create_project(team_id=leader.team_id, name="UI", type=ProjectType.UI_ONLY, deadline=utcnow() + timedelta(days=20))

    assert {p.phase for p in full.phase_statuses} == {Phase.FRONTEND, Phase.BACKEND, Phase.UI}
    assert [p.phase for p in ui.phase_statuses] == [Phase.UI]
    assert all(p.status == PhaseStatus.STARTED for p in full.phase_statuses)

    updated = projects.update_phase_status(project_id=ui.id, phase=Phase.UI, status=PhaseStatus.COMPLETED)
    assert updated.status == PhaseStatus.COMPLETED
    with pytest.raises(NotFound):
        projects.update_phase_status(project_id=ui.id, phase=Phase.BACKEND, status=PhaseStatus.COMPLETED)


def test_delete_project_cascades(project, leader, member):
    projects.assign_user(project_id=project.id, user_id=member.id, phase=Phase.FRONTEND)
    projects.update_status(project_id=project.id, status=ProjectStatus.WIP, updated_by_id=leader.id)
    note = notes.create_note(project_id=project.id, content="spec", created_by_id=leader.id)
    notes.update_note(note_id=note.id, content="spec v2", updated_by_id=leader.id)

    projects.delete_project(project_id=project.id)

    with pytest.raises(NotFound):
        projects.get_project(project_id=project.id)
    with pytest.raises(NotFound):
        notes.get_note_history(note_id=note.id)
    assert _history_count(project.id) == 0
    with SessionFactory() as session:
        assert session.query(NoteHistory).filter(NoteHistory.note_id == note.id).count() == 0


def test_assignment_requires_same_team(project, outsider):
    with pytest.raises(BadRequest):
        projects.assign_user(project_id=project.id, user_id=outsider.id, phase=Phase.UI)
