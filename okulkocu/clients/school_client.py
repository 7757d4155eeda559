# okulkocu/clients/school_client.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from okulkocu.core.config import settings
from okulkocu.core.errors import ApiError, AuthError, ConnectionFailed, DataError
from okulkocu.core.token_store import TokenStore
from okulkocu.middlewares.request_id import REQUEST_ID_HEADER, current_request_id
from okulkocu.schemas.auth import LoginResult, TokenPair
from okulkocu.schemas.school import (
    AbsenceRecord,
    AttendanceMark,
    ClassItem,
    HomeworkForm,
    HomeworkItem,
    Lesson,
    RosterQuery,
    RosterRow,
    StudentRecord,
    TeacherRecord,
    UserInfo,
)

logger = logging.getLogger(__name__)

TOKEN_INVALID_MESSAGE = "Token geçersiz veya süresi dolmuş"
REFRESH_PATH = "/auth/refresh"
TEACHERS_PAGE_SIZE = 20

M = TypeVar("M", bound=BaseModel)


class AuthFailureHandler(Protocol):
    async def handle_auth_failure(self) -> None: ...


TokensRefreshed = Callable[[str, Optional[str]], Awaitable[None]]


class SchoolClient:
    """
    Okul Koçu backend HTTP erişim katmanı

    - Tek, uzun ömürlü httpx.AsyncClient; base_url ayarlardan gelir.
    - request hook: depoda token varsa `Authorization: Bearer <token>` ekler, yoksa sadece loglar.
    - 401 veya "Token geçersiz..." mesajı: refresh token ile bir kez yenile, isteği bir kez tekrarla.
      Eşzamanlı 401'ler tek bir refresh çağrısını paylaşır.
    - Yenileme olmazsa enjekte edilen AuthFailureHandler çağrılır (oturum temizlenir) ve AuthError atılır.
    - transport: yalnızca testlerde MockTransport enjekte etmek için.
    """

    def __init__(
        self,
        store: TokenStore,
        *,
        auth_failure_handler: Optional[AuthFailureHandler] = None,
        on_tokens_refreshed: Optional[TokensRefreshed] = None,
        base_url: Optional[str] = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._store = store
        self._auth_failure_handler = auth_failure_handler
        self._on_tokens_refreshed = on_tokens_refreshed
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._connect_timeout = settings.connect_timeout
        self._read_timeout = settings.read_timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self._refresh_task: Optional[asyncio.Task] = None

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._connect_timeout,
            read=self._read_timeout,
            write=self._read_timeout,
            pool=self._connect_timeout,
        )

    def _client_kwargs(self) -> Dict[str, Any]:
        kw: Dict[str, Any] = {
            "base_url": self._base_url,
            "timeout": self._timeout(),
            "headers": {"Accept": "application/json"},
            "event_hooks": {"request": [self._attach_token]},
        }
        if self._transport is not None:
            kw["transport"] = self._transport
        return kw

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(**self._client_kwargs())
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "SchoolClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ---- interceptors ----

    async def _attach_token(self, request: httpx.Request) -> None:
        rid = current_request_id.get()
        if rid and REQUEST_ID_HEADER not in request.headers:
            request.headers[REQUEST_ID_HEADER] = rid

        # tekrar denenen istek yeni token'ı kendisi taşır
        if "Authorization" in request.headers:
            return

        token = await self._store.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        else:
            logger.info("No access token in store for %s %s", request.method, request.url.path)

    @staticmethod
    def _is_auth_failure(resp: httpx.Response) -> bool:
        if resp.status_code == 401:
            return True
        if "json" not in (resp.headers.get("content-type") or ""):
            return False
        try:
            body = resp.json()
        except ValueError:
            return False
        return isinstance(body, dict) and body.get("message") == TOKEN_INVALID_MESSAGE

    async def _refresh(self) -> Optional[str]:
        refresh_token = await self._store.get_refresh_token()
        if not refresh_token:
            logger.info("No refresh token stored, cannot refresh access token")
            return None

        try:
            resp = await self.http.post(REFRESH_PATH, json={"refreshToken": refresh_token})
            if resp.is_error:
                logger.warning("Token refresh rejected: HTTP %s", resp.status_code)
                return None
            pair = TokenPair.model_validate(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Token refresh failed: %s", e)
            return None

        await self._store.set_token(pair.accessToken)
        if pair.refreshToken:
            await self._store.set_refresh_token(pair.refreshToken)
        if self._on_tokens_refreshed is not None:
            await self._on_tokens_refreshed(pair.accessToken, pair.refreshToken)
        logger.info("Access token refreshed")
        return pair.accessToken

    def _forget_refresh(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _refreshed_token(self, failed: httpx.Response) -> Optional[str]:
        sent = failed.request.headers.get("Authorization")
        current = await self._store.get_token()
        if current and sent != f"Bearer {current}":
            # başka bir istek token'ı zaten yeniledi
            return current

        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._refresh())
            self._refresh_task.add_done_callback(self._forget_refresh)
        return await self._refresh_task

    async def _auth_failed(self, reason: str) -> AuthError:
        if self._auth_failure_handler is not None:
            await self._auth_failure_handler.handle_auth_failure()
        else:
            logger.warning("Auth failure with no handler registered: %s", reason)
        return AuthError(reason)

    # ---- request pipeline ----

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        recover_auth: bool = True,
    ) -> httpx.Response:
        kw: Dict[str, Any] = {"json": json, "data": data, "files": files}
        try:
            resp = await self.http.request(method, path, **kw)

            if recover_auth and self._is_auth_failure(resp):
                new_token = await self._refreshed_token(resp)
                if new_token is None:
                    raise await self._auth_failed("Oturum süresi doldu, lütfen tekrar giriş yapın")

                resp = await self.http.request(
                    method, path, headers={"Authorization": f"Bearer {new_token}"}, **kw
                )
                # ikinci 401'de yeniden refresh yok
                if self._is_auth_failure(resp):
                    raise await self._auth_failed("Yenilenen token da reddedildi")
        except httpx.TransportError as e:
            raise ConnectionFailed(f"Sunucuya bağlanılamadı: {e}") from e

        if resp.is_error:
            raise ApiError(
                f"{method} {path} başarısız: HTTP {resp.status_code}",
                status=resp.status_code,
                body=self._safe_body(resp),
            )
        return resp

    async def post(self, path: str, payload: Any = None, **kw: Any) -> Any:
        resp = await self.request("POST", path, json={} if payload is None else payload, **kw)
        return self._json(resp, path)

    @staticmethod
    def _safe_body(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return (resp.text or "")[:200]

    @staticmethod
    def _json(resp: httpx.Response, path: str) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise DataError(f"{path} geçersiz JSON döndürdü") from e

    @staticmethod
    def _parse_one(data: Any, model: Type[M], path: str) -> M:
        if not isinstance(data, dict):
            raise DataError(f"{path} beklenmeyen yanıt: {type(data).__name__}")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DataError(f"{path} yanıtı doğrulanamadı: {e.error_count()} hata") from e

    @staticmethod
    def _parse_list(data: Any, model: Type[M], path: str) -> List[M]:
        if not isinstance(data, list):
            raise DataError(f"{path} liste döndürmedi: {type(data).__name__}")
        items: List[M] = []
        for index, raw in enumerate(data):
            try:
                items.append(model.model_validate(raw))
            except ValidationError as e:
                logger.warning("%s item %d skipped: %s", path, index, e.errors()[:1])
        return items

    # ---- endpoints ----

    async def login(self, username: str, password: str) -> Optional[LoginResult]:
        """Yanlış kullanıcı adı/şifrede None."""
        try:
            data = await self.post(
                "/user/login", {"username": username, "password": password}, recover_auth=False
            )
        except ApiError as e:
            if e.body is False:
                return None
            raise
        if data is False:
            return None
        return self._parse_one(data, LoginResult, "/user/login")

    async def refresh_tokens(self) -> Optional[str]:
        return await self._refresh()

    async def fetch_user_info(self) -> UserInfo:
        data = await self.post("/user/info")
        return self._parse_one(data, UserInfo, "/user/info")

    async def fetch_all_students(self) -> List[StudentRecord]:
        data = await self.post("/student/all")
        return self._parse_list(data, StudentRecord, "/student/all")

    async def fetch_classes(self) -> List[ClassItem]:
        data = await self.post("/student/classall")
        return self._parse_list(data, ClassItem, "/student/classall")

    async def fetch_teachers(self, page: int = 1, limit: int = TEACHERS_PAGE_SIZE) -> List[TeacherRecord]:
        data = await self.post("/teacher/allteacher", {"page": page, "limit": limit})
        return self._parse_list(data, TeacherRecord, "/teacher/allteacher")

    async def fetch_lessons(self, class_name: str, date: str) -> List[Lesson]:
        data = await self.post("/teacher/dersler", {"Sinif": class_name, "tarih": date})
        return self._parse_list(data or [], Lesson, "/teacher/dersler")

    async def fetch_attendance_roster(self, query: RosterQuery) -> List[RosterRow]:
        data = await self.post("/teacher/attendance", query.to_payload())
        return self._parse_list(data or [], RosterRow, "/teacher/attendance")

    async def add_attendance(self, mark: AttendanceMark) -> Any:
        return await self.post("/teacher/attendanceadd", mark.to_payload())

    async def fetch_teacher_schedule(self, teacher_id: int) -> List[Lesson]:
        data = await self.post("/schedule/getteacher", {"id": teacher_id})
        return self._parse_list(data, Lesson, "/schedule/getteacher")

    async def fetch_student_attendance(self, student_id: int) -> List[AbsenceRecord]:
        data = await self.post("/student/attendance", {"OgrenciID": student_id})
        return self._parse_list(data or [], AbsenceRecord, "/student/attendance")

    async def fetch_student_homework(self, student_id: int, class_name: str = "") -> List[HomeworkItem]:
        data = await self.post("/student/homework", {"OgrenciID": student_id, "Sinif": class_name or ""})
        return self._parse_list(data or [], HomeworkItem, "/student/homework")

    async def assign_homework(
        self,
        form: HomeworkForm,
        *,
        photo: Optional[bytes] = None,
        photo_name: str = "homework_photo.jpg",
        photo_type: str = "image/jpeg",
    ) -> Any:
        files = {"photo": (photo_name, photo, photo_type)} if photo else None
        resp = await self.request("POST", "/teacher/homework", data=form.to_form(), files=files)
        return self._json(resp, "/teacher/homework")
