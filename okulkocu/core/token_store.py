from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from okulkocu.core.config import Settings, settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"
THEME_KEY = "theme"
ROLE_KEY = "role"
SCHOOL_CODE_KEY = "schoolCode"

_STORE_ERRORS = (OSError, ValueError, RedisError)


class TokenStore:
    """
    Kalıcı anahtar/değer deposu (access/refresh token, tema, oturum alanları).

    - Tüm işlemler async.
    - Depo kullanılamazsa hata loglanır ve yutulur: okuma None döner, yazma no-op olur.
    - None yazmak anahtarı siler. Değer biçimi doğrulanmaz.
    """

    async def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def _write(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def _delete(self, key: str) -> None:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._read(key)
        except _STORE_ERRORS as e:
            logger.warning("Token store read failed for %s: %s", key, e)
            return None

    async def set(self, key: str, value: Optional[str]) -> None:
        try:
            if value is None:
                await self._delete(key)
            else:
                await self._write(key, value)
        except _STORE_ERRORS as e:
            logger.warning("Token store write failed for %s: %s", key, e)

    async def get_token(self) -> Optional[str]:
        return await self.get(ACCESS_TOKEN_KEY)

    async def set_token(self, value: Optional[str]) -> None:
        await self.set(ACCESS_TOKEN_KEY, value)

    async def get_refresh_token(self) -> Optional[str]:
        return await self.get(REFRESH_TOKEN_KEY)

    async def set_refresh_token(self, value: Optional[str]) -> None:
        await self.set(REFRESH_TOKEN_KEY, value)

    async def get_theme(self) -> Optional[str]:
        return await self.get(THEME_KEY)

    async def set_theme(self, value: Optional[str]) -> None:
        await self.set(THEME_KEY, value)

    async def get_role(self) -> Optional[str]:
        return await self.get(ROLE_KEY)

    async def set_role(self, value: Optional[str]) -> None:
        await self.set(ROLE_KEY, value)

    async def get_school_code(self) -> Optional[str]:
        return await self.get(SCHOOL_CODE_KEY)

    async def set_school_code(self, value: Optional[str]) -> None:
        await self.set(SCHOOL_CODE_KEY, value)

    async def clear_tokens(self) -> None:
        # tema tercihi oturumdan bağımsızdır, silinmez
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, ROLE_KEY):
            await self.set(key, None)


class MemoryTokenStore(TokenStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    async def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def _write(self, key: str, value: str) -> None:
        self._data[key] = value

    async def _delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileTokenStore(TokenStore):
    """JSON dosyası; süreç yeniden başlasa da değerler kalır."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} bir JSON nesnesi değil")
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)

    async def _read(self, key: str) -> Optional[str]:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def _write(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._dump, data)

    async def _delete(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if key in data:
                del data[key]
                await asyncio.to_thread(self._dump, data)


class RedisTokenStore(TokenStore):
    def __init__(self, redis: Redis, *, key_prefix: str = "okulkocu:store:") -> None:
        self._redis = redis
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def _read(self, key: str) -> Optional[str]:
        raw = await self._redis.get(self._key(key))
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    async def _write(self, key: str, value: str) -> None:
        await self._redis.set(self._key(key), value)

    async def _delete(self, key: str) -> None:
        await self._redis.delete(self._key(key))


def build_token_store(cfg: Settings = settings) -> TokenStore:
    kind = (cfg.token_store or "file").lower()
    if kind == "memory":
        return MemoryTokenStore()
    if kind == "redis":
        from okulkocu.core.redis import get_redis

        return RedisTokenStore(get_redis(cfg.redis_url), key_prefix=cfg.redis_prefix)
    if kind == "file":
        return FileTokenStore(cfg.token_file)
    raise ValueError(f"Bilinmeyen OKUL_TOKEN_STORE: {cfg.token_store!r}")
