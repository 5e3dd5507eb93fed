"""
Error taxonomy shared by the auth, persistence and HTTP layers.

Every error carries the HTTP status it maps to; the handlers registered in
``api.middleware`` render them as ``{"error": message}``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateError(ValidationError):
    default_message = "Username or email already exists"


class AuthError(AppError):
    status_code = 401
    default_message = "Authentication required"


class ExpiredTokenError(AuthError):
    default_message = "Token has expired"


class InvalidTokenError(AuthError):
    default_message = "Invalid token"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class InternalError(AppError):
    status_code = 500


class TokenError(AppError):
    """Raised when a token cannot be signed (e.g. no secret configured)."""

    status_code = 500
    default_message = "Failed to generate token"


@contextmanager
def failure_boundary(action: str, message: str) -> Iterator[None]:
    """
    Let client-facing ``AppError``s (4xx) through untouched; log anything
    else and re-raise it as ``InternalError(message)`` so internals never
    reach the client.
    """
    try:
        yield
    except AppError as exc:
        if exc.status_code < 500:
            raise
        logger.error("%s error: %s", action, exc.message)
        raise InternalError(message) from exc
    except Exception as exc:
        logger.exception("%s error", action)
        raise InternalError(message) from exc
