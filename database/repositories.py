"""
Repositories over the ``users`` and ``tasks`` tables.

The abstract classes are what route handlers depend on; the ``Sql*``
implementations open one ``AsyncSession`` per call from a session factory
built at startup, and commit or roll back before returning.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.models import Task, User
from utils.errors import DuplicateError

logger = logging.getLogger(__name__)

# Columns a caller may set through ``TaskRepository.create`` / ``update``.
TASK_FIELDS = frozenset({"title", "description", "priority", "status", "due_date"})


class UserRepository(ABC):
    @abstractmethod
    async def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        before_commit: Optional[Callable[[User], None]] = None,
    ) -> User:
        """
        Insert a user.  *before_commit* sees the row with its id assigned;
        if it raises, nothing is stored.
        """
        ...


class TaskRepository(ABC):
    @abstractmethod
    async def list_by_owner(self, user_id: int) -> List[Task]:
        ...

    @abstractmethod
    async def find_by_id(self, task_id: int) -> Optional[Task]:
        ...

    @abstractmethod
    async def create(self, user_id: int, fields: Dict[str, Any]) -> Task:
        ...

    @abstractmethod
    async def update(self, task_id: int, fields: Dict[str, Any]) -> Optional[Task]:
        ...

    @abstractmethod
    async def delete(self, task_id: int) -> bool:
        ...


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    tasks: TaskRepository


def _task_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - TASK_FIELDS
    if unknown:
        raise ValueError(f"Unknown task fields: {sorted(unknown)}")
    return dict(fields)


class SqlUserRepository(UserRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(User)
                .where(or_(User.username == username, User.email == email))
                .order_by(User.id)
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        before_commit: Optional[Callable[[User], None]] = None,
    ) -> User:
        async with self._session_factory() as session:
            user = User(username=username, email=email, password_hash=password_hash)
            session.add(user)
            try:
                await session.flush()
                if before_commit is not None:
                    before_commit(user)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.info("Duplicate user rejected by constraint: %s / %s", username, email)
                raise DuplicateError() from exc
            except Exception:
                await session.rollback()
                raise
            return user


class SqlTaskRepository(TaskRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_by_owner(self, user_id: int) -> List[Task]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Task)
                .where(Task.user_id == user_id)
                .order_by(Task.created_at.desc(), Task.id.desc())
            )
            return list(result.scalars().all())

    async def find_by_id(self, task_id: int) -> Optional[Task]:
        async with self._session_factory() as session:
            return await session.get(Task, task_id)

    async def create(self, user_id: int, fields: Dict[str, Any]) -> Task:
        async with self._session_factory() as session:
            task = Task(user_id=user_id, **_task_columns(fields))
            session.add(task)
            await session.commit()
            return task

    async def update(self, task_id: int, fields: Dict[str, Any]) -> Optional[Task]:
        """Apply only the keys present in *fields*; ``None`` values are written as-is."""
        columns = _task_columns(fields)
        async with self._session_factory() as session:
            task = await session.get(Task, task_id)
            if task is None:
                return None
            for name, value in columns.items():
                setattr(task, name, value)
            await session.commit()
            return task

    async def delete(self, task_id: int) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(delete(Task).where(Task.id == task_id))
            await session.commit()
            return result.rowcount > 0


def build_repositories(session_factory: async_sessionmaker[AsyncSession]) -> Repositories:
    return Repositories(
        users=SqlUserRepository(session_factory),
        tasks=SqlTaskRepository(session_factory),
    )
