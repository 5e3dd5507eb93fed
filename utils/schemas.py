"""
Pydantic schemas for the task tracker API.

Request bodies keep the camelCase names clients send (``dueDate``);
responses are serialised in camelCase via an alias generator.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from database.models import TaskPriority, TaskStatus
from utils.validators import as_utc, parse_due_date, validate_choice


def _required_text(label: str) -> Callable[[Any], Any]:
    """Build a before-validator rejecting ``None`` and blank strings."""

    def check(value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError(f"{label} is required")
        return value

    return check


# ═══════════════════════════════════════════════════════════════════════════════
# Auth — requests
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    username: str = Field(..., max_length=64)
    email: str = Field(..., max_length=255)
    # Length policy lives in PasswordHasher, so only presence matters here.
    password: Optional[str] = None

    check_username = field_validator("username", mode="before")(_required_text("Username"))
    check_email = field_validator("email", mode="before")(_required_text("Email"))


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks — requests
# ═══════════════════════════════════════════════════════════════════════════════


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")

    check_title = field_validator("title", mode="before")(_required_text("Title"))

    @field_validator("priority", mode="before")
    @classmethod
    def check_priority(cls, value: Any) -> TaskPriority:
        return validate_choice(value, TaskPriority, "priority")

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value: Any) -> TaskStatus:
        return validate_choice(value, TaskStatus, "status")

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, value: Any) -> Optional[datetime]:
        return parse_due_date(value)

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump()


class TaskUpdate(BaseModel):
    """Partial update: only the keys present in the request body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")

    check_title = field_validator("title", mode="before")(_required_text("Title"))

    @field_validator("priority", mode="before")
    @classmethod
    def check_priority(cls, value: Any) -> TaskPriority:
        return validate_choice(value, TaskPriority, "priority")

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value: Any) -> TaskStatus:
        return validate_choice(value, TaskStatus, "status")

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, value: Any) -> Optional[datetime]:
        return parse_due_date(value)

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserSummary(_CamelModel):
    id: int
    username: str
    email: str


class UserProfile(UserSummary):
    created_at: datetime

    normalize_utc = field_validator("created_at")(as_utc)


class TaskOut(_CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime] = None
    user_id: int
    created_at: datetime

    normalize_utc = field_validator("due_date", "created_at")(as_utc)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserSummary


class ProfileResponse(BaseModel):
    user: UserProfile


class TokenResponse(BaseModel):
    message: str
    token: str


class MessageResponse(BaseModel):
    message: str
