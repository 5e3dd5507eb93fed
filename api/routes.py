"""
REST API routes — profile and task CRUD.

Every task route checks ownership: a task that exists but belongs to
someone else is answered with 403, never with its contents.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Response, status
from pydantic import ValidationError as SchemaError

from auth.dependencies import CurrentUser, get_current_user, get_repositories
from database.models import Task
from database.repositories import Repositories
from utils.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    failure_boundary,
)
from utils.schemas import (
    MessageResponse,
    ProfileResponse,
    TaskCreate,
    TaskOut,
    TaskUpdate,
    UserProfile,
)
from utils.validators import describe_validation_errors

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])
root_router = APIRouter(tags=["health"])


@root_router.get("/", response_model=MessageResponse)
async def root() -> MessageResponse:
    return MessageResponse(message="Task tracker backend is running")


# Ids are positive and must fit the signed 64-bit primary key column.
_MAX_TASK_ID = 2**63 - 1


def _parse_task_id(raw: str) -> int:
    try:
        task_id = int(raw)
    except ValueError:
        raise NotFoundError("Task not found") from None
    if not 0 < task_id <= _MAX_TASK_ID:
        raise NotFoundError("Task not found")
    return task_id


async def _load_owned_task(
    repos: Repositories, raw_id: str, current: CurrentUser, verb: str
) -> Task:
    """Fetch a task, 404 if absent, 403 if the caller does not own it."""
    task = await repos.tasks.find_by_id(_parse_task_id(raw_id))
    if task is None:
        raise NotFoundError("Task not found")
    if task.user_id != current.user_id:
        logger.warning(
            "User %s tried to %s task %s owned by %s",
            current.user_id, verb, task.id, task.user_id,
        )
        raise AuthorizationError(f"Unauthorized to {verb} this task")
    return task


# ── Profile ────────────────────────────────────────────────────────────


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> ProfileResponse:
    with failure_boundary("Profile", "Failed to fetch profile"):
        user = await repos.users.find_by_id(current.user_id)
        if user is None:
            raise NotFoundError("User not found")
    return ProfileResponse(user=UserProfile.model_validate(user))


# ── Tasks ──────────────────────────────────────────────────────────────


@router.get("/tasks", response_model=List[TaskOut])
async def list_tasks(
    current: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> List[TaskOut]:
    """All of the caller's tasks, newest first."""
    with failure_boundary("Tasks fetch", "Failed to fetch tasks"):
        tasks = await repos.tasks.list_by_owner(current.user_id)
    return [TaskOut.model_validate(task) for task in tasks]


@router.post("/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    req: TaskCreate,
    current: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> TaskOut:
    with failure_boundary("Task creation", "Failed to create task"):
        task = await repos.tasks.create(current.user_id, req.to_fields())
    logger.info("User %s created task %s", current.user_id, task.id)
    return TaskOut.model_validate(task)


@router.get("/tasks/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: str,
    current: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> TaskOut:
    with failure_boundary("Task fetch", "Failed to fetch task"):
        task = await _load_owned_task(repos, task_id, current, "view")
    return TaskOut.model_validate(task)


@router.put("/tasks/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: str,
    body: Optional[Dict[str, Any]] = Body(default=None),
    current: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> TaskOut:
    """
    Partial update: fields missing from the body are left unchanged.

    The body is validated only after the ownership check, so a caller
    never learns anything about a task they do not own.
    """
    with failure_boundary("Task update", "Failed to update task"):
        task = await _load_owned_task(repos, task_id, current, "update")
        try:
            changes = TaskUpdate.model_validate(body or {})
        except SchemaError as exc:
            raise ValidationError(describe_validation_errors(exc.errors())) from exc
        updated = await repos.tasks.update(task.id, changes.to_fields())
        if updated is None:
            raise NotFoundError("Task not found")
    return TaskOut.model_validate(updated)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_task(
    task_id: str,
    current: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
) -> Response:
    with failure_boundary("Task deletion", "Failed to delete task"):
        task = await _load_owned_task(repos, task_id, current, "delete")
        if not await repos.tasks.delete(task.id):
            raise NotFoundError("Task not found")
    logger.info("User %s deleted task %s", current.user_id, task.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
