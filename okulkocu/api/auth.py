# okulkocu/api/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from okulkocu.api.deps import get_auth_service, get_session_state
from okulkocu.core.session import Session, SessionState
from okulkocu.schemas.auth import LoginRequest, SessionView
from okulkocu.services import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _view(session: Session) -> SessionView:
    return SessionView(
        isAuthenticated=session.is_authenticated,
        status=session.status.value,
        role=session.role.value if session.role else None,
        schoolCode=session.school_code,
    )


@router.post("/login")
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    session = await service.login(
        username=payload.username,
        password=payload.password,
        school_code=payload.school_code,
    )
    return {"success": True, "message": "Giriş başarılı", "data": _view(session)}


@router.post("/logout")
async def logout(service: AuthService = Depends(get_auth_service)):
    await service.logout()
    return {"success": True, "message": "Çıkış yapıldı"}


@router.get("/session")
async def session(state: SessionState = Depends(get_session_state)) -> SessionView:
    return _view(state.current)
