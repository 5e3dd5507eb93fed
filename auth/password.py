"""
Password policy and bcrypt hashing.

A password must be present, at least ``min_length`` characters and no more
than the 72 bytes bcrypt accepts.  ``verify`` reports a malformed stored
hash as a mismatch instead of raising.

Both operations are CPU-bound; route handlers call them through
``asyncio.to_thread`` so the event loop keeps serving other requests.
"""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt

from utils.errors import ValidationError

logger = logging.getLogger(__name__)

_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 10, min_length: int = 8) -> None:
        self.rounds = rounds
        self.min_length = min_length

    def hash(self, password: Optional[str]) -> str:
        """Check the length policy, then hash with a fresh salt at ``rounds`` cost."""
        if not password:
            raise ValidationError("Password is required")
        if len(password) < self.min_length:
            raise ValidationError(
                f"Password must be at least {self.min_length} characters long"
            )
        raw = password.encode()
        if len(raw) > _BCRYPT_MAX_BYTES:
            raise ValidationError(
                f"Password must be at most {_BCRYPT_MAX_BYTES} bytes long"
            )
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """True only when *password* matches; unreadable hashes count as no match."""
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Password verification error: %s", exc)
            return False
