"""
Auth API routes — register, login, refresh, logout.

Route prefix: /auth
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_password_hasher,
    get_repositories,
    get_token_service,
)
from auth.jwt import TokenClaims, TokenService
from auth.password import PasswordHasher
from database.models import User
from database.repositories import Repositories
from utils.errors import AuthError, DuplicateError, ValidationError, failure_boundary
from utils.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

_INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    repos: Repositories = Depends(get_repositories),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """
    Register a new user.

    The token is signed before the row is committed, so a signing failure
    leaves no account behind.
    """
    issued: Dict[str, str] = {}

    def sign(new_user: User) -> None:
        issued["token"] = tokens.issue(new_user.id, new_user.email)

    with failure_boundary("Registration", "Registration failed"):
        password_hash = await asyncio.to_thread(hasher.hash, req.password)

        existing = await repos.users.find_by_username_or_email(req.username, req.email)
        if existing is not None:
            raise DuplicateError("Username or email already exists")

        user = await repos.users.create(
            req.username, req.email, password_hash, before_commit=sign
        )
        token = issued["token"]

    logger.info("Registered user %s (%s)", user.username, user.id)
    return AuthResponse(
        message="Registration successful",
        token=token,
        user=UserSummary.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    repos: Repositories = Depends(get_repositories),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    """Login with email + password."""
    if not req.email or not req.password:
        raise ValidationError("Email and password required")

    with failure_boundary("Login", "Login failed"):
        user = await repos.users.find_by_email(req.email)
        # Same answer for unknown email and wrong password.
        if user is None or not await asyncio.to_thread(
            hasher.verify, req.password, user.password_hash
        ):
            raise AuthError(_INVALID_CREDENTIALS)

        token = tokens.issue(user.id, user.email)

    logger.info("Login: %s (%s)", user.username, user.id)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserSummary.model_validate(user),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    response: Response,
    current: CurrentUser = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Reissue a token for the caller; also exposed as ``X-New-Token``."""
    with failure_boundary("Token refresh", "Failed to refresh token"):
        claims = TokenClaims(
            user_id=current.user_id,
            email=current.email,
            issued_at=current.issued_at,
        )
        new_token = tokens.refresh(claims)

    response.headers["X-New-Token"] = new_token
    return TokenResponse(message="Token refreshed", token=new_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(current: CurrentUser = Depends(get_current_user)) -> MessageResponse:
    """Stateless logout: the client drops its token, which stays valid until expiry."""
    logger.info("Logout: user %s", current.user_id)
    return MessageResponse(message="Logged out successfully")
