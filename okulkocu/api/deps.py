# okulkocu/api/deps.py
from __future__ import annotations

from fastapi import Depends, Request

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.errors import AuthError, ScreenForbidden
from okulkocu.core.navigation import can_open
from okulkocu.core.session import Session, SessionState
from okulkocu.core.theme import ThemeState
from okulkocu.services import (
    AttendanceService,
    AuthService,
    DashboardService,
    DirectoryService,
    HomeworkService,
    ScheduleService,
    StudentService,
)


def get_session_state(request: Request) -> SessionState:
    return request.app.state.session


def get_theme_state(request: Request) -> ThemeState:
    return request.app.state.theme


def get_school_client(request: Request) -> SchoolClient:
    return request.app.state.school_client


def get_auth_service(
    client: SchoolClient = Depends(get_school_client),
    session: SessionState = Depends(get_session_state),
) -> AuthService:
    return AuthService(client, session)


def get_dashboard_service(client: SchoolClient = Depends(get_school_client)) -> DashboardService:
    return DashboardService(client)


def get_directory_service(client: SchoolClient = Depends(get_school_client)) -> DirectoryService:
    return DirectoryService(client)


def get_schedule_service(client: SchoolClient = Depends(get_school_client)) -> ScheduleService:
    return ScheduleService(client)


def get_student_service(client: SchoolClient = Depends(get_school_client)) -> StudentService:
    return StudentService(client)


def get_homework_service(client: SchoolClient = Depends(get_school_client)) -> HomeworkService:
    return HomeworkService(client)


def get_attendance_service(request: Request) -> AttendanceService:
    # açık yoklama listeleri istekler arasında yaşar
    return request.app.state.attendance


def require_screen(screen: str):
    async def _dep(state: SessionState = Depends(get_session_state)) -> Session:
        session = state.current
        if not session.is_authenticated:
            raise AuthError("Giriş yapmanız gerekiyor")
        if not can_open(session, screen):
            raise ScreenForbidden(f"{screen} ekranı bu rol için kapalı")
        return session
    return _dep
