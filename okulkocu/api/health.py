from __future__ import annotations

from fastapi import APIRouter, Depends

from okulkocu.api.deps import get_session_state, get_theme_state
from okulkocu.core.session import SessionState
from okulkocu.core.theme import ThemeState

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/liveness")
async def liveness():
    return {"status": "ok"}


@router.get("/readiness")
async def readiness(
    session: SessionState = Depends(get_session_state),
    theme: ThemeState = Depends(get_theme_state),
):
    # durumlar depodan yüklendiyse hazır
    return {
        "status": "ok" if theme.loaded else "starting",
        "session": session.current.status.value,
        "theme": theme.name,
    }
