"""
Task tracker backend — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api.middleware import register_exception_handlers, register_middleware
from api.routes import root_router
from api.routes import router as api_router
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.repositories import build_repositories
from database.session import build_engine, build_session_factory, create_tables

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("aiosqlite", "asyncio", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.jwt_secret:
            logger.warning("JWT_SECRET not set — token issuance will fail until it is configured.")

        engine = build_engine(settings.database_url, echo=settings.debug)
        logger.info("Ensuring database tables exist…")
        await create_tables(engine)

        app.state.settings = settings
        app.state.password_hasher = PasswordHasher(
            rounds=settings.bcrypt_rounds,
            min_length=settings.password_min_length,
        )
        app.state.token_service = TokenService(
            settings.jwt_secret,
            expiry_seconds=settings.jwt_expiry_seconds,
            algorithm=settings.jwt_algorithm,
        )
        app.state.repositories = build_repositories(build_session_factory(engine))

        logger.info("Application ready to accept requests.")
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(
        title="Task Tracker",
        version="1.0.0",
        description="Multi-user task tracking with JWT authentication.",
        lifespan=lifespan,
    )

    register_middleware(app, frontend_url=settings.normalized_frontend_url)
    register_exception_handlers(app)

    # Routes
    app.include_router(root_router)
    app.include_router(auth_router, prefix="/auth")
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
