import uuid

import pytest

from teamhub.api.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from teamhub.database.core import chat, notes, notifications, projects, users
from teamhub.database.entities.enums import NotificationType, Phase, ProjectStatus, UserRole
from teamhub.database.entities.user import User
from teamhub.database.helpers.transactionManagement import SessionFactory


def _register(**overrides):
    data = dict(team_name="Falcon", name="Paula", email="paula@falcon.test", password="pw-paula")
    data.update(overrides)
    return users.register_individual(**data)


def test_team_name_must_be_unique(leader):
    with pytest.raises(BadRequest, match="Team name already exists"):
        users.register_team(team_name="Falcon", name="Fred", email="fred@falcon.test", password="pw")


def test_registered_user_waits_for_approval(leader):
    pending = _register()
    assert pending.is_approved is False
    assert pending.team_id == leader.team_id

    with pytest.raises(Forbidden, match="pending approval"):
        users.login_user(email="paula@falcon.test", password="pw-paula")
    # Wrong password still reads as bad credentials.
    with pytest.raises(Unauthorized):
        users.login_user(email="paula@falcon.test", password="wrong")

    assert [u.id for u in users.get_pending_users(team_id=leader.team_id)] == [pending.id]
    assert pending.id not in [u.id for u in users.get_team_members(team_id=leader.team_id)]


def test_register_into_a_department(leader):
    department = users.create_department(team_id=leader.team_id, name="Design")
    pending = _register(department_name="Design")
    assert pending.department_id == department.id

    with pytest.raises(NotFound, match="Department not found"):
        _register(email="other@falcon.test", department_name="Legal")


def test_register_errors(leader):
    with pytest.raises(NotFound, match="Team not found"):
        _register(team_name="Nowhere")
    with pytest.raises(BadRequest):
        _register(email="lena@falcon.test")


def test_approval_notifies_and_unlocks_login(leader):
    pending = _register()
    approved = users.approve_user(user_id=pending.id, team_id=leader.team_id)
    assert approved.is_approved is True

    assert users.login_user(email="paula@falcon.test", password="pw-paula").id == pending.id
    assert users.get_pending_users(team_id=leader.team_id) == []

    inbox = notifications.get_notifications(user_id=pending.id)
    assert len(inbox) == 1
    assert inbox[0].type == NotificationType.APPROVAL
    assert inbox[0].title == "Account Approved"

    with pytest.raises(BadRequest, match="already approved"):
        users.approve_user(user_id=pending.id, team_id=leader.team_id)


def test_leader_of_another_team_cannot_approve(leader, outsider):
    pending = _register()
    with pytest.raises(NotFound, match="User not found in your team"):
        users.approve_user(user_id=pending.id, team_id=outsider.team_id)
    with pytest.raises(NotFound):
        users.reject_user(user_id=pending.id, team_id=outsider.team_id)


def test_reject_removes_pending_account(leader, member):
    pending = _register()
    users.reject_user(user_id=pending.id, team_id=leader.team_id)
    with SessionFactory() as session:
        assert session.get(User, pending.id) is None

    with pytest.raises(BadRequest, match="Cannot reject an already approved user"):
        users.reject_user(user_id=member.id, team_id=leader.team_id)


def test_update_role_and_department(leader, member, outsider):
    department = users.create_department(team_id=leader.team_id, name="Backend")
    updated = users.update_user_role(
        user_id=member.id, team_id=leader.team_id, role=UserRole.LEADER, department_id=department.id
    )
    assert updated.role == UserRole.LEADER
    assert updated.department_id == department.id

    foreign = users.create_department(team_id=outsider.team_id, name="Backend")
    with pytest.raises(NotFound, match="Department not found"):
        users.update_user_role(
            user_id=member.id, team_id=leader.team_id, role=UserRole.MEMBER, department_id=foreign.id
        )
    with pytest.raises(NotFound):
        users.update_user_role(user_id=uuid.uuid4(), team_id=leader.team_id, role=UserRole.MEMBER)


def test_delete_user_removes_their_rows(leader, member, project):
    projects.assign_user(project_id=project.id, user_id=member.id, phase=Phase.BACKEND)
    room = chat.create_chat_room(name="Dev", team_id=leader.team_id, creator_id=leader.id)
    chat.add_member_to_chat_room(chat_room_id=room.id, user_id=member.id, added_by_user_id=leader.id)
    message = chat.create_message(chat_room_id=room.id, sender_id=member.id, content="hi")
    chat.mark_message_as_seen(message_id=message.id, user_id=leader.id)
    note = notes.create_note(project_id=project.id, content="spec", created_by_id=member.id)

    users.delete_user(user_id=member.id, team_id=leader.team_id)

    with SessionFactory() as session:
        assert session.get(User, member.id) is None
    assert chat.get_chat_room_messages(chat_room_id=room.id, user_id=leader.id) == []
    assert projects.get_project(project_id=project.id).assignments == []
    assert notes.get_note_history(note_id=note.id).current.created_by_id is None


def test_delete_user_refusals(leader, member, project):
    with pytest.raises(BadRequest, match="team leader"):
        users.delete_user(user_id=leader.id, team_id=leader.team_id)

    projects.update_status(project_id=project.id, status=ProjectStatus.WIP, updated_by_id=member.id)
    with pytest.raises(Conflict) as excinfo:
        users.delete_user(user_id=member.id, team_id=leader.team_id)
    assert excinfo.value.status_code == 409
    assert users.get_user(user_id=member.id).id == member.id
