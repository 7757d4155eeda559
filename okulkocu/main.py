# okulkocu/main.py
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from okulkocu.api.auth import router as auth_router
from okulkocu.api.health import router as health_router
from okulkocu.api.preferences import router as preferences_router
from okulkocu.api.screens import router as screens_router
from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.config import settings
from okulkocu.core.errors import (
    OkulKocuError,
    http_exception_handler,
    okulkocu_exception_handler,
    validation_exception_handler,
)
from okulkocu.core.session import SessionState
from okulkocu.core.theme import ThemeState
from okulkocu.core.token_store import TokenStore, build_token_store
from okulkocu.middlewares.logging import LoggingMiddleware, configure_logging
from okulkocu.middlewares.request_id import request_id_middleware
from okulkocu.services import AttendanceService


def create_app(
    *,
    store: Optional[TokenStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """store/transport: testlerde bellek deposu ve MockTransport enjekte etmek için"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        token_store = store or build_token_store()
        session = SessionState(token_store, school_code=settings.school_code)
        theme = ThemeState(token_store)
        client = SchoolClient(
            token_store,
            auth_failure_handler=session,
            on_tokens_refreshed=session.update_tokens,
            transport=transport,
        )

        app.state.token_store = token_store
        app.state.session = session
        app.state.theme = theme
        app.state.school_client = client
        attendance = AttendanceService(client)
        session.subscribe(attendance.session_changed)
        app.state.attendance = attendance

        await session.load()
        await theme.load()
        yield
        await client.aclose()

    configure_logging()
    app = FastAPI(title="Okul Koçu", lifespan=lifespan)

    # middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # exception handlers
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OkulKocuError, okulkocu_exception_handler)

    # routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(preferences_router)
    app.include_router(screens_router)
    return app


app = create_app()
