"""
Tests for the SQLAlchemy user and task repositories.
"""

from datetime import datetime, timezone

import pytest

from database.models import TaskPriority, TaskStatus
from utils.errors import DuplicateError


async def _user(repos, username="alice", email="a@x.com"):
    return await repos.users.create(username, email, "$2b$04$not-a-real-hash")


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_create_and_find(self, repos):
        user = await _user(repos)

        assert user.id is not None
        assert user.created_at is not None
        assert (await repos.users.find_by_id(user.id)).username == "alice"
        assert (await repos.users.find_by_email("a@x.com")).id == user.id
        assert await repos.users.find_by_email("missing@x.com") is None
        assert await repos.users.find_by_id(user.id + 100) is None

    @pytest.mark.asyncio
    async def test_find_by_username_or_email(self, repos):
        user = await _user(repos)

        assert (await repos.users.find_by_username_or_email("alice", "other@x.com")).id == user.id
        assert (await repos.users.find_by_username_or_email("other", "a@x.com")).id == user.id
        assert await repos.users.find_by_username_or_email("other", "other@x.com") is None

    @pytest.mark.asyncio
    async def test_unique_constraint_surfaces_as_duplicate(self, repos):
        await _user(repos)
        with pytest.raises(DuplicateError):
            await _user(repos, email="second@x.com")
        with pytest.raises(DuplicateError):
            await _user(repos, username="second")


    @pytest.mark.asyncio
    async def test_before_commit_sees_assigned_id(self, repos):
        seen = []
        user = await repos.users.create(
            "alice", "a@x.com", "$2b$04$not-a-real-hash", before_commit=lambda u: seen.append(u.id)
        )
        assert seen == [user.id]

    @pytest.mark.asyncio
    async def test_failing_before_commit_stores_nothing(self, repos):
        def refuse(_user):
            raise RuntimeError("signing unavailable")

        with pytest.raises(RuntimeError):
            await repos.users.create("alice", "a@x.com", "$2b$04$x", before_commit=refuse)

        assert await repos.users.find_by_email("a@x.com") is None
        assert (await _user(repos)).username == "alice"


class TestTaskRepository:
    @pytest.mark.asyncio
    async def test_create_applies_model_defaults(self, repos):
        owner = await _user(repos)
        task = await repos.tasks.create(owner.id, {"title": "t"})

        assert task.priority is TaskPriority.MEDIUM
        assert task.status is TaskStatus.PENDING
        assert task.user_id == owner.id

    @pytest.mark.asyncio
    async def test_list_by_owner_newest_first(self, repos):
        alice = await _user(repos)
        bob = await _user(repos, "bob", "b@x.com")
        older = await repos.tasks.create(alice.id, {"title": "older"})
        newer = await repos.tasks.create(alice.id, {"title": "newer"})
        await repos.tasks.create(bob.id, {"title": "bob's"})

        tasks = await repos.tasks.list_by_owner(alice.id)

        assert [t.id for t in tasks] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_find_by_id_ignores_owner(self, repos):
        owner = await _user(repos)
        task = await repos.tasks.create(owner.id, {"title": "t"})

        found = await repos.tasks.find_by_id(task.id)

        assert found.user_id == owner.id
        assert await repos.tasks.find_by_id(task.id + 1) is None

    @pytest.mark.asyncio
    async def test_update_is_partial(self, repos):
        owner = await _user(repos)
        due = datetime(2030, 1, 15, tzinfo=timezone.utc)
        task = await repos.tasks.create(
            owner.id,
            {"title": "t", "description": "d", "priority": TaskPriority.HIGH, "due_date": due},
        )

        updated = await repos.tasks.update(task.id, {"status": TaskStatus.COMPLETED})
        reloaded = await repos.tasks.find_by_id(task.id)

        assert updated.status is TaskStatus.COMPLETED
        assert reloaded.status is TaskStatus.COMPLETED
        assert reloaded.title == "t"
        assert reloaded.description == "d"
        assert reloaded.priority is TaskPriority.HIGH
        assert reloaded.due_date.replace(tzinfo=timezone.utc) == due

    @pytest.mark.asyncio
    async def test_update_can_clear_due_date(self, repos):
        owner = await _user(repos)
        task = await repos.tasks.create(
            owner.id, {"title": "t", "due_date": datetime(2030, 1, 15, tzinfo=timezone.utc)},
        )

        await repos.tasks.update(task.id, {"due_date": None})

        assert (await repos.tasks.find_by_id(task.id)).due_date is None

    @pytest.mark.asyncio
    async def test_update_missing_task(self, repos):
        assert await repos.tasks.update(12345, {"title": "x"}) is None

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_columns(self, repos):
        owner = await _user(repos)
        task = await repos.tasks.create(owner.id, {"title": "t"})
        with pytest.raises(ValueError):
            await repos.tasks.update(task.id, {"user_id": owner.id + 1})

    @pytest.mark.asyncio
    async def test_delete(self, repos):
        owner = await _user(repos)
        task = await repos.tasks.create(owner.id, {"title": "t"})

        assert await repos.tasks.delete(task.id) is True
        assert await repos.tasks.delete(task.id) is False
        assert await repos.tasks.find_by_id(task.id) is None
