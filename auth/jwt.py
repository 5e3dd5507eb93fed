"""
JWT creation and verification.

Tokens are HS256-signed JWTs carrying ``userId``, ``email``, ``iat`` and
``exp``.  Secret and lifetime come from ``config.jwt_secret`` /
``config.jwt_expiry_seconds`` (env vars ``JWT_SECRET`` / ``JWT_EXPIRY_SECONDS``).

``verify`` never raises: it returns a :class:`TokenVerification` whose
``status`` the caller switches on.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import jwt

from utils.errors import TokenError


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    issued_at: int


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"
    ERROR = "error"


@dataclass(frozen=True)
class TokenVerification:
    status: TokenStatus
    claims: Optional[TokenClaims] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.VALID


class TokenService:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 604800,
        algorithm: str = "HS256",
    ) -> None:
        self._secret = secret
        self.expiry_seconds = expiry_seconds
        self.algorithm = algorithm

    def issue(self, user_id: int, email: str) -> str:
        """Create a signed token for ``user_id`` / ``email``."""
        if not self._secret:
            raise TokenError("Failed to generate token: no signing secret configured")
        now = int(time.time())
        payload: Dict[str, Any] = {
            "userId": user_id,
            "email": email,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise TokenError(f"Failed to generate token: {exc}") from exc

    def verify(self, token: str) -> TokenVerification:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            return TokenVerification(TokenStatus.EXPIRED)
        except jwt.InvalidTokenError as exc:
            return TokenVerification(TokenStatus.INVALID, detail=str(exc))
        except Exception as exc:
            return TokenVerification(TokenStatus.ERROR, detail=repr(exc))

        user_id = payload.get("userId")
        email = payload.get("email")
        if user_id is None or email is None:
            return TokenVerification(TokenStatus.INVALID, detail="missing identity claims")
        return TokenVerification(
            TokenStatus.VALID,
            claims=TokenClaims(user_id=user_id, email=email, issued_at=payload["iat"]),
        )

    def refresh(self, claims: TokenClaims) -> str:
        """Reissue a token for already-authenticated claims.

        Nothing is stored or revoked; the previous token stays valid until
        it expires.
        """
        return self.issue(claims.user_id, claims.email)
