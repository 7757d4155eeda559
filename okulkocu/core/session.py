from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from okulkocu.core.token_store import TokenStore

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"


# backend "rol" alanı -> rol adı; bilinmeyen değerler veli sayılır
ROLE_CODES = {"1": Role.ADMIN, "2": Role.TEACHER, "3": Role.PARENT}


def role_from_code(code: object) -> Role:
    return ROLE_CODES.get(str(code).strip(), Role.PARENT)


class SessionStatus(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    role: Optional[Role] = None
    school_code: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED and self.access_token is not None


SessionListener = Callable[[Session], None]


class SessionState:
    """
    Süreç genelindeki oturum durumu: unauthenticated -> authenticating -> authenticated -> unauthenticated

    - Tek sahibi budur; ekranlar yalnızca `current` okur.
    - Token/rol/okul kodu TokenStore'a da yazılır, `load()` açılışta geri yükler.
    - API istemcisinin AuthFailureHandler'ıdır: yenilenemeyen token -> clear_session().
    """

    def __init__(self, store: TokenStore, *, school_code: Optional[str] = None) -> None:
        self._store = store
        self._current = Session(school_code=school_code)
        # giriş denemesi başarısız olursa geri dönülecek oturum
        self._previous: Optional[Session] = None
        self._listeners: List[SessionListener] = []

    @property
    def current(self) -> Session:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current.is_authenticated

    @property
    def role(self) -> Optional[Role]:
        return self._current.role

    @property
    def school_code(self) -> Optional[str]:
        return self._current.school_code

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, session: Session) -> None:
        self._current = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener failed")

    async def load(self) -> Session:
        token = await self._store.get_token()
        role_name = await self._store.get_role()
        school_code = await self._store.get_school_code() or self._current.school_code

        if token and role_name in {r.value for r in Role}:
            self._transition(Session(
                status=SessionStatus.AUTHENTICATED,
                access_token=token,
                refresh_token=await self._store.get_refresh_token(),
                role=Role(role_name),
                school_code=school_code,
            ))
        else:
            self._transition(Session(school_code=school_code))
        return self._current

    def begin_authentication(self) -> None:
        if self._current.status is not SessionStatus.AUTHENTICATING:
            self._previous = self._current
        self._transition(replace(self._current, status=SessionStatus.AUTHENTICATING))

    def abort_authentication(self) -> None:
        """Başarısız giriş: önceki oturum (depodaki kopyayla aynı) aynen geri gelir."""
        if self._current.status is not SessionStatus.AUTHENTICATING:
            return
        previous = self._previous or Session(school_code=self._current.school_code)
        self._previous = None
        self._transition(previous)

    async def set_session(
        self,
        *,
        access_token: str,
        role: Role | str,
        refresh_token: Optional[str] = None,
        school_code: Optional[str] = None,
    ) -> Session:
        role = Role(role)
        school_code = school_code or self._current.school_code
        self._previous = None

        await self._store.set_token(access_token)
        await self._store.set_refresh_token(refresh_token)
        await self._store.set_role(role.value)
        await self._store.set_school_code(school_code)

        self._transition(Session(
            status=SessionStatus.AUTHENTICATED,
            access_token=access_token,
            refresh_token=refresh_token,
            role=role,
            school_code=school_code,
        ))
        logger.info("Session started (role=%s, school=%s)", role.value, school_code)
        return self._current

    async def update_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """Yenilenen token'ları bellekteki kopyaya yansıtır (depo zaten güncellendi)."""
        if self._current.status is not SessionStatus.AUTHENTICATED:
            return
        self._transition(replace(
            self._current,
            access_token=access_token,
            refresh_token=refresh_token or self._current.refresh_token,
        ))

    async def clear_session(self) -> None:
        await self._store.clear_tokens()
        self._previous = None
        # okul kodu oturumdan sonra da seçili kalır
        self._transition(Session(school_code=self._current.school_code))
        logger.info("Session cleared")

    async def handle_auth_failure(self) -> None:
        logger.warning("Unrecoverable auth failure, clearing session")
        await self.clear_session()
