from __future__ import annotations

from functools import lru_cache
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from okulkocu.core.config import settings


@lru_cache(maxsize=4)
def get_redis(url: Optional[str] = None) -> Redis:
    url = url or settings.redis_url
    if not url:
        raise RuntimeError("REDIS_URL yapılandırılmamış (OKUL_TOKEN_STORE=redis için gerekli)")

    # redis:// ve rediss:// desteklenir; bağlantı ilk komutta açılır
    return redis.from_url(url, decode_responses=settings.redis_decode_responses)
