"""
Global middleware: access log, CORS policy and error rendering.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from utils.errors import AppError
from utils.validators import describe_validation_errors

logger = logging.getLogger(__name__)

_LOCALHOST_ORIGIN = re.compile(r"^http://localhost(:\d+)?$")


def is_origin_allowed(origin: Optional[str], frontend_url: Optional[str]) -> bool:
    """
    Cross-origin policy.

    No ``Origin`` at all (curl, server-to-server) is always fine; otherwise
    the origin must equal the configured frontend URL or be plain-HTTP
    localhost on any port.  Trailing slashes are ignored on both sides.
    """
    if not origin:
        return True
    normalized = origin.rstrip("/")
    if frontend_url and normalized == frontend_url.rstrip("/"):
        return True
    return bool(_LOCALHOST_ORIGIN.match(normalized))


class FrontendCORSMiddleware(CORSMiddleware):
    """Starlette CORS with :func:`is_origin_allowed` deciding which origins pass."""

    def __init__(self, app: ASGIApp, frontend_url: Optional[str] = None) -> None:
        super().__init__(
            app,
            allow_origins=(),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-New-Token"],
        )
        self.frontend_url = frontend_url

    def is_allowed_origin(self, origin: str) -> bool:
        return is_origin_allowed(origin, self.frontend_url)


def register_middleware(app: FastAPI, frontend_url: Optional[str] = None) -> None:
    """Install the CORS policy and the per-request access log."""

    app.add_middleware(FrontendCORSMiddleware, frontend_url=frontend_url)

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - started) * 1000
        response.headers["X-Response-Time-Ms"] = str(round(duration_ms, 1))
        logger.debug(
            "%s %s -> %d in %.1f ms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}`` with the mapped status."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = describe_validation_errors(list(exc.errors()))
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
