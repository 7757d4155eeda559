import pytest


@pytest.mark.asyncio
async def test_liveness(client):
    r = await client.get("/api/health/liveness")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_readiness_reports_loaded_state(client):
    r = await client.get("/api/health/readiness")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["session"] == "unauthenticated"
    assert body["theme"] == "dark"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    r = await client.get("/api/health/liveness", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"


def test_mask_sensitive_nested():
    from okulkocu.middlewares.logging import mask_sensitive

    masked = mask_sensitive({"username": "u", "password": "p", "data": [{"token": "t", "rol": "2"}]})

    assert masked == {"username": "u", "password": "***", "data": [{"token": "***", "rol": "2"}]}


def test_personal_fields_are_masked():
    from okulkocu.middlewares.logging import mask_sensitive

    masked = mask_sensitive([{"AdSoyad": "Ali", "TCKimlikNo": "12345678901", "Telefon": "05551112233"}])

    assert masked == [{"AdSoyad": "Ali", "TCKimlikNo": "***", "Telefon": "***"}]
