import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from okulkocu.core.config import Settings
from okulkocu.core.token_store import (
    FileTokenStore,
    MemoryTokenStore,
    RedisTokenStore,
    build_token_store,
)


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.data = {}
        self.fail = fail

    async def get(self, key):
        if self.fail:
            raise RedisConnectionError("down")
        return self.data.get(key)

    async def set(self, key, value):
        if self.fail:
            raise RedisConnectionError("down")
        self.data[key] = value.encode("utf-8")

    async def delete(self, key):
        self.data.pop(key, None)


@pytest.mark.asyncio
async def test_file_store_survives_restart(tmp_path):
    path = tmp_path / "state" / "tokens.json"
    first = FileTokenStore(path)
    await first.set_token("t1")
    await first.set_refresh_token("r1")
    await first.set_theme("light")

    second = FileTokenStore(path)
    assert await second.get_token() == "t1"
    assert await second.get_refresh_token() == "r1"
    assert await second.get_theme() == "light"


@pytest.mark.asyncio
async def test_clear_tokens_keeps_theme_and_school_code():
    store = MemoryTokenStore()
    await store.set_token("t")
    await store.set_refresh_token("r")
    await store.set_role("teacher")
    await store.set_theme("light")
    await store.set_school_code("OKUL1")

    await store.clear_tokens()

    assert await store.get_token() is None
    assert await store.get_refresh_token() is None
    assert await store.get_role() is None
    assert await store.get_theme() == "light"
    assert await store.get_school_code() == "OKUL1"


@pytest.mark.asyncio
async def test_setting_none_deletes_key():
    store = MemoryTokenStore({"token": "t"})
    await store.set_token(None)
    assert await store.get_token() is None


@pytest.mark.asyncio
async def test_corrupt_file_reads_as_absent(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text("{not json", encoding="utf-8")

    store = FileTokenStore(path)

    assert await store.get_token() is None


@pytest.mark.asyncio
async def test_redis_store_prefixes_keys():
    redis = FakeRedis()
    store = RedisTokenStore(redis, key_prefix="test:")

    await store.set_token("t1")

    assert redis.data == {"test:token": b"t1"}
    assert await store.get_token() == "t1"


@pytest.mark.asyncio
async def test_redis_failure_is_silent():
    store = RedisTokenStore(FakeRedis(fail=True))

    await store.set_token("t1")
    assert await store.get_token() is None


def test_build_token_store_dispatch(tmp_path):
    assert isinstance(build_token_store(Settings(OKUL_TOKEN_STORE="memory")), MemoryTokenStore)
    file_store = build_token_store(Settings(OKUL_TOKEN_STORE="file", OKUL_TOKEN_FILE=str(tmp_path / "t.json")))
    assert isinstance(file_store, FileTokenStore)
    with pytest.raises(ValueError):
        build_token_store(Settings(OKUL_TOKEN_STORE="sqlite"))


def test_build_redis_store_from_url():
    store = build_token_store(Settings(OKUL_TOKEN_STORE="redis", REDIS_URL="redis://localhost:6379/0"))
    assert isinstance(store, RedisTokenStore)


def test_redis_store_requires_url(monkeypatch):
    from okulkocu.core import redis as redis_module

    monkeypatch.setattr(redis_module.settings, "redis_url", None)
    with pytest.raises(RuntimeError):
        redis_module.get_redis(None)
