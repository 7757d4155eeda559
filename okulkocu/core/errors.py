from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class OkulKocuError(Exception):
    """Base exception for Okul Koçu client errors."""

    status_code = 500


class AuthError(OkulKocuError):
    """Missing, expired or unrecoverable credentials."""

    status_code = 401


class ApiError(OkulKocuError):
    """The backend answered with a non-success status."""

    status_code = 502

    def __init__(self, message: str, *, status: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ConnectionFailed(OkulKocuError):
    """The backend could not be reached."""

    status_code = 503


class DataError(OkulKocuError):
    """Response body could not be decoded or had an unexpected shape."""

    status_code = 502


class ValidationFailed(OkulKocuError):
    """Input rejected before any request was made."""

    status_code = 400


class ScreenForbidden(OkulKocuError):
    """The current role cannot reach this screen."""

    status_code = 403


def _now():
    return datetime.now(timezone.utc).isoformat()


def _envelope(request: Request, status_code: int, message: Any, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            **extra,
            "path": str(request.url.path),
            "requestId": getattr(request.state, "request_id", None),
            "timestamp": _now(),
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _envelope(request, exc.status_code, exc.detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _envelope(request, 422, "Parametre doğrulaması başarısız", errors=exc.errors())


async def okulkocu_exception_handler(request: Request, exc: OkulKocuError):
    extra: dict[str, Any] = {"error": type(exc).__name__}
    if isinstance(exc, ApiError) and exc.status is not None:
        extra["upstreamStatus"] = exc.status
    return _envelope(request, exc.status_code, str(exc), **extra)
