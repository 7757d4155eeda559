import asyncio

import httpx
import pytest

from okulkocu.clients.school_client import TOKEN_INVALID_MESSAGE
from okulkocu.core.errors import ApiError, AuthError, ConnectionFailed, DataError

STUDENTS = [{"OgrenciId": 1, "AdSoyad": "Ali Yılmaz", "Sinif": "5-A", "OgrenciNumara": 30}]


def _refresh_ok(access="new", refresh="r2"):
    return lambda request: httpx.Response(200, json={"accessToken": access, "refreshToken": refresh})


def _only_with(token, payload):
    def handler(request):
        if request.headers.get("Authorization") == f"Bearer {token}":
            return httpx.Response(200, json=payload)
        return httpx.Response(401, json={"message": "Unauthorized"})
    return handler


@pytest.mark.asyncio
async def test_request_without_token_has_no_authorization_header(school_client, backend):
    backend.on("/student/all", json=STUDENTS)

    students = await school_client.fetch_all_students()

    assert [s.AdSoyad for s in students] == ["Ali Yılmaz"]
    assert students[0].OgrenciNumara == "30"
    assert "authorization" not in backend.requests[0].headers


@pytest.mark.asyncio
async def test_stored_token_is_attached(school_client, store, backend):
    await store.set_token("abc")
    backend.on("/student/all", json=[])

    await school_client.fetch_all_students()

    assert backend.requests[0].headers["Authorization"] == "Bearer abc"


@pytest.mark.asyncio
async def test_401_refreshes_once_and_retries(school_client, store, session_state, backend):
    await session_state.set_session(access_token="old", refresh_token="r1", role="teacher")
    backend.on("/student/all", _only_with("new", STUDENTS))
    backend.on("/auth/refresh", _refresh_ok())

    students = await school_client.fetch_all_students()

    assert len(students) == 1
    assert len(backend.calls("/auth/refresh")) == 1
    assert backend.body(backend.calls("/auth/refresh")[0]) == {"refreshToken": "r1"}
    assert len(backend.calls("/student/all")) == 2
    assert await store.get_token() == "new"
    assert await store.get_refresh_token() == "r2"
    assert session_state.current.access_token == "new"


@pytest.mark.asyncio
async def test_second_401_clears_session_without_second_refresh(school_client, store, session_state, backend):
    await session_state.set_session(access_token="old", refresh_token="r1", role="teacher")
    backend.on("/student/all", status=401, json={"message": "Unauthorized"})
    backend.on("/auth/refresh", _refresh_ok())

    with pytest.raises(AuthError):
        await school_client.fetch_all_students()

    assert len(backend.calls("/auth/refresh")) == 1
    assert len(backend.calls("/student/all")) == 2
    assert not session_state.is_authenticated
    assert await store.get_token() is None
    assert await store.get_refresh_token() is None


@pytest.mark.asyncio
async def test_failed_refresh_clears_session(school_client, store, session_state, backend):
    await session_state.set_session(access_token="old", refresh_token="r1", role="parent")
    backend.on("/student/all", status=401, json={})
    backend.on("/auth/refresh", status=403, json={"message": "refresh token geçersiz"})

    with pytest.raises(AuthError):
        await school_client.fetch_all_students()

    assert len(backend.calls("/student/all")) == 1
    assert not session_state.is_authenticated
    assert await store.get_token() is None


@pytest.mark.asyncio
async def test_no_refresh_token_means_auth_failure(school_client, store, session_state, backend):
    await session_state.set_session(access_token="old", role="admin")
    backend.on("/user/info", status=401, json={})

    with pytest.raises(AuthError):
        await school_client.fetch_user_info()

    assert backend.calls("/auth/refresh") == []
    assert not session_state.is_authenticated


@pytest.mark.asyncio
async def test_concurrent_401s_share_one_refresh(school_client, session_state, backend):
    await session_state.set_session(access_token="old", refresh_token="r1", role="teacher")
    backend.on("/student/all", _only_with("new", STUDENTS))

    async def slow_refresh(request):
        await asyncio.sleep(0.05)
        return httpx.Response(200, json={"accessToken": "new", "refreshToken": "r2"})

    backend.on("/auth/refresh", slow_refresh)

    results = await asyncio.gather(*(school_client.fetch_all_students() for _ in range(3)))

    assert all(len(r) == 1 for r in results)
    assert len(backend.calls("/auth/refresh")) == 1


@pytest.mark.asyncio
async def test_token_invalid_message_triggers_refresh(school_client, session_state, backend):
    await session_state.set_session(access_token="old", refresh_token="r1", role="teacher")

    def info(request):
        if request.headers.get("Authorization") == "Bearer new":
            return httpx.Response(200, json={"AdSoyad": "Ayşe Öğretmen", "OgretmenID": 7})
        return httpx.Response(403, json={"message": TOKEN_INVALID_MESSAGE})

    backend.on("/user/info", info)
    backend.on("/auth/refresh", _refresh_ok())

    user = await school_client.fetch_user_info()

    assert user.OgretmenID == 7
    assert len(backend.calls("/auth/refresh")) == 1


@pytest.mark.asyncio
async def test_error_status_raises_api_error(school_client, backend):
    backend.on("/student/classall", status=500, json={"message": "Sunucu hatası"})

    with pytest.raises(ApiError) as exc:
        await school_client.fetch_classes()

    assert exc.value.status == 500
    assert exc.value.body == {"message": "Sunucu hatası"}


@pytest.mark.asyncio
async def test_transport_error_raises_connection_failed(store):
    from okulkocu.clients.school_client import SchoolClient

    def boom(request):
        raise httpx.ConnectError("unreachable", request=request)

    async with SchoolClient(store, base_url="http://backend.test/api", transport=httpx.MockTransport(boom)) as c:
        with pytest.raises(ConnectionFailed):
            await c.fetch_all_students()


@pytest.mark.asyncio
async def test_non_list_response_raises_data_error(school_client, backend):
    backend.on("/student/all", json={"unexpected": True})

    with pytest.raises(DataError):
        await school_client.fetch_all_students()


@pytest.mark.asyncio
async def test_invalid_list_items_are_skipped(school_client, backend):
    backend.on("/teacher/allteacher", json=[
        {"OgretmenID": 1, "AdSoyad": "Ayşe"},
        {"AdSoyad": "kimliksiz"},
    ])

    teachers = await school_client.fetch_teachers(page=2)

    assert [t.OgretmenID for t in teachers] == [1]
    assert backend.body(backend.requests[0]) == {"page": 2, "limit": 20}


@pytest.mark.asyncio
async def test_login_false_means_bad_credentials(school_client, backend):
    backend.on("/user/login", json=False)

    assert await school_client.login("u", "p") is None


@pytest.mark.asyncio
async def test_login_401_is_not_refreshed(school_client, store, backend):
    await store.set_refresh_token("r1")
    backend.on("/user/login", status=401, json={"message": "Yetkisiz"})
    backend.on("/auth/refresh", _refresh_ok())

    with pytest.raises(ApiError):
        await school_client.login("u", "p")

    assert backend.calls("/auth/refresh") == []


@pytest.mark.asyncio
async def test_homework_without_photo_is_form_encoded(school_client, backend):
    from okulkocu.schemas.school import HomeworkForm

    backend.on("/teacher/homework", json={"success": True})
    form = HomeworkForm(subject="Matematik", topic="Kesirler", description="s. 12", due_date="2024-05-10", class_name="5-A")

    await school_client.assign_homework(form)

    request = backend.calls("/teacher/homework")[0]
    assert request.headers["content-type"].startswith("application/x-www-form-urlencoded")
    assert b"KayitTuru=0" in request.content


@pytest.mark.asyncio
async def test_homework_with_photo_is_multipart(school_client, backend):
    from okulkocu.schemas.school import HomeworkForm

    backend.on("/teacher/homework", json={"success": True})
    form = HomeworkForm(subject="Fen", topic="Bitkiler", description="deney", due_date="2024-05-10", student_number="30")

    await school_client.assign_homework(form, photo=b"\xff\xd8jpeg", photo_name="odev.jpg")

    request = backend.calls("/teacher/homework")[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="photo"; filename="odev.jpg"' in request.content
    assert b'name="KayitTuru"\r\n\r\n1' in request.content
