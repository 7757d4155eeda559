import pytest

from okulkocu.core.navigation import LOGIN_SCREEN, can_open, menu_for, roles_for
from okulkocu.core.session import Role, Session, SessionStatus


def _session(role):
    return Session(status=SessionStatus.AUTHENTICATED, access_token="t", role=role)


def test_logged_out_only_reaches_login():
    assert can_open(Session(), LOGIN_SCREEN)
    assert not can_open(Session(), "AdminDashboard")
    assert menu_for(None) == []


def test_every_menu_target_is_reachable():
    for role in Role:
        for item in menu_for(role):
            assert can_open(_session(role), item.screen), (role, item)


@pytest.mark.parametrize("role,screen,allowed", [
    (Role.ADMIN, "AdminDashboard", True),
    (Role.ADMIN, "AttendanceLesson", False),
    (Role.TEACHER, "AttendanceLesson", True),
    (Role.TEACHER, "HomeworkAssignment", True),
    (Role.TEACHER, "StudentAbsences", False),
    (Role.PARENT, "StudentHomeworkList", True),
    (Role.PARENT, "StudentsList", False),
])
def test_role_gating(role, screen, allowed):
    assert can_open(_session(role), screen) is allowed


def test_roles_for_shared_screen():
    assert roles_for("TeachersList") == [Role.ADMIN, Role.TEACHER]
