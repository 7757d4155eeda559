# okulkocu/middlewares/logging.py
"""İstek/yanıt log middleware'i

Not: BaseHTTPMiddleware yerine saf ASGI middleware; Python 3.11+ üzerindeki
ExceptionGroup uyumsuzluğundan kaçınmak için.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, List, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from okulkocu.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger("api.access")

SENSITIVE_KEYS = {"password", "token", "accessToken", "refreshToken", "TCKimlikNo", "Telefon"}
MAX_LOGGED_BODY = 2000


def configure_logging(level: str | None = None) -> None:
    lvl = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    for lg in (logging.getLogger("okulkocu"), logger):
        lg.setLevel(lvl)
        if not lg.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            lg.addHandler(handler)


def mask_sensitive(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: ("***" if k in SENSITIVE_KEYS else mask_sensitive(v)) for k, v in value.items()}
    if isinstance(value, list):
        return [mask_sensitive(v) for v in value]
    return value


def _masked_json(parts: List[bytes]) -> Optional[str]:
    """Gövde JSON ise maskelenmiş ve kısaltılmış metni; değilse (multipart, form) None."""
    if not parts:
        return None
    try:
        content = json.loads(b"".join(parts).decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    text = json.dumps(mask_sensitive(content), ensure_ascii=False)
    if len(text) > MAX_LOGGED_BODY:
        text = text[:MAX_LOGGED_BODY] + "...[kesildi]"
    return text


class LoggingMiddleware:
    """Her isteği `api.access` logger'ına yazar; şifre ve token alanları maskelenir."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope.get("path", "")
        query = scope.get("query_string", b"").decode("utf-8")
        logger.info(">>> %s %s%s", method, path, f" | Query: {query}" if query else "")

        request_parts: List[bytes] = []
        response_parts: List[bytes] = []
        status = 0

        async def recording_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request" and message.get("body"):
                request_parts.append(message["body"])
            return message

        async def recording_send(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message.get("status", 0)
            elif message["type"] == "http.response.body" and message.get("body"):
                response_parts.append(message["body"])
            await send(message)

        started = time.perf_counter()
        try:
            await self.app(scope, recording_receive, recording_send)
        finally:
            elapsed = time.perf_counter() - started

            if method in ("POST", "PUT", "PATCH"):
                body = _masked_json(request_parts)
                if body is not None:
                    logger.debug("    Body: %s", body)

            line = f"<<< {method} {path} | Status: {status} | Time: {elapsed:.3f}s"
            payload = _masked_json(response_parts)
            logger.info(line if payload is None else f"{line}\n{payload}")
