"""
FastAPI dependencies for authentication.

The password hasher, token service and repositories are built once in the
application lifespan and kept on ``app.state``; these dependencies hand them
to route handlers.  ``get_current_user`` is the bearer-token gate used by
every protected route.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from auth.jwt import TokenService, TokenStatus
from auth.password import PasswordHasher
from database.repositories import Repositories
from utils.errors import AuthError, ExpiredTokenError, InvalidTokenError

logger = logging.getLogger(__name__)

_BEARER_SCHEME = "Bearer"


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    email: str
    issued_at: int


def get_repositories(request: Request) -> Repositories:
    return request.app.state.repositories


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization`` header value.

    Accepts ``Bearer <token>`` or a bare token.
    """
    if not authorization:
        raise AuthError("No authorization header provided")
    scheme, _, rest = authorization.strip().partition(" ")
    token = rest.strip() if scheme == _BEARER_SCHEME else authorization.strip()
    if not token:
        raise AuthError("No token provided")
    return token


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """
    Verify the bearer token and return the caller's identity.

    The identity is also stored on ``request.state.user``.
    """
    token = extract_bearer_token(authorization)
    result = tokens.verify(token)

    if result.status is TokenStatus.EXPIRED:
        raise ExpiredTokenError("Token has expired")
    if result.status is TokenStatus.INVALID:
        logger.debug("Rejected token: %s", result.detail)
        raise InvalidTokenError("Invalid token")
    if result.status is not TokenStatus.VALID or result.claims is None:
        logger.error("Token verification error: %s", result.detail)
        raise AuthError("Token verification failed")

    user = CurrentUser(
        user_id=result.claims.user_id,
        email=result.claims.email,
        issued_at=result.claims.issued_at,
    )
    request.state.user = user
    return user
