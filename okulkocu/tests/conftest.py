# okulkocu/tests/conftest.py
from __future__ import annotations

import inspect
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.session import SessionState
from okulkocu.core.token_store import MemoryTokenStore
from okulkocu.main import create_app

BACKEND_URL = "http://backend.test/api"


class FakeBackend:
    """
    Okul backend'inin yerine geçen MockTransport:
    - yol -> handler(request) eşlemesi; handler async olabilir
    - gelen tüm istekler kaydedilir
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], Any]] = {}
        self.requests: List[httpx.Request] = []

    def on(self, path: str, handler: Optional[Callable] = None, *, json: Any = None, status: int = 200) -> None:
        if handler is None:
            def handler(request: httpx.Request, _json=json, _status=status) -> httpx.Response:
                return httpx.Response(_status, json=_json)
        self.routes[path] = handler

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        handler = self.routes.get(path)
        if handler is None:
            return httpx.Response(404, json={"message": f"{path} bulunamadı"})
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def session_state(store) -> SessionState:
    return SessionState(store, school_code="OKUL1")


@pytest_asyncio.fixture
async def school_client(store, session_state, backend):
    client = SchoolClient(
        store,
        auth_failure_handler=session_state,
        on_tokens_refreshed=session_state.update_tokens,
        base_url=BACKEND_URL,
        transport=backend.transport,
    )
    async with client:
        yield client


@pytest_asyncio.fixture
async def client(store, backend):
    """
    Uygulamaya bağlı async HTTP istemcisi:
    - lifespan (startup/shutdown) tetiklenir
    - token deposu bellekte, backend MockTransport
    """
    app = create_app(store=store, transport=backend.transport)
    async with LifespanManager(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
