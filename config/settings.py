"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = ""                 # HMAC secret for auth tokens (required to sign)
    jwt_expiry_seconds: int = 604800     # 7 days
    jwt_algorithm: str = "HS256"

    # ── Passwords ────────────────────────────────────────────────────────
    bcrypt_rounds: int = 10
    password_min_length: int = 8

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./tasks.db"

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 4000
    host: str = "0.0.0.0"
    debug: bool = False
    frontend_url: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @property
    def normalized_frontend_url(self) -> Optional[str]:
        """Frontend origin with trailing slashes removed, or ``None``."""
        if not self.frontend_url:
            return None
        return self.frontend_url.rstrip("/")


config = Settings()
