from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.responses import Response


REQUEST_ID_HEADER = "X-Request-ID"

# backend'e giden isteklere de aynı id eklenir (SchoolClient request hook)
current_request_id: ContextVar[Optional[str]] = ContextVar("current_request_id", default=None)


async def request_id_middleware(request: Request, call_next):
    rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = rid
    token = current_request_id.set(rid)
    try:
        response: Response = await call_next(request)
    finally:
        current_request_id.reset(token)
    response.headers[REQUEST_ID_HEADER] = rid
    return response
