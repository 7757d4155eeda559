# okulkocu/api/preferences.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from okulkocu.api.deps import get_session_state, get_theme_state
from okulkocu.core.navigation import menu_for
from okulkocu.core.session import SessionState
from okulkocu.core.theme import ThemeState

router = APIRouter(prefix="/api", tags=["preferences"])


def _theme_view(theme: ThemeState) -> dict:
    return {"name": theme.name, "isDark": theme.is_dark, "colors": theme.palette}


@router.get("/theme")
async def get_theme(theme: ThemeState = Depends(get_theme_state)):
    return _theme_view(theme)


@router.post("/theme/toggle")
async def toggle_theme(theme: ThemeState = Depends(get_theme_state)):
    await theme.toggle()
    return _theme_view(theme)


@router.get("/menu")
async def menu(state: SessionState = Depends(get_session_state)):
    session = state.current
    role = session.role if session.is_authenticated else None
    return {
        "role": role.value if role else None,
        "items": [asdict(item) for item in menu_for(role)],
    }
