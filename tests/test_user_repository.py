"""Integration tests for UserRepository against a temporary SQLite database."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from account_api.core.errors import ConflictError, InternalError
from account_api.models import Role, User
from account_api.repositories.user_repository import UserRepository
from sqlite_db import TemporaryDatabase


class UserRepositoryTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = TemporaryDatabase()
        await self.db.create_schema()
        self.session = self.db.sessionmaker()
        self.repository = UserRepository(self.session)

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.db.dispose()
        self.db.cleanup()


class TestCreateUser(UserRepositoryTestCase):
    """create_user persists the user and links roles found or created by name."""

    async def test_creates_user_with_default_role(self) -> None:
        user = await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        self.assertIsNotNone(user.id)
        self.assertEqual(user.username, "alice")
        self.assertEqual(user.nickname, "A")
        self.assertEqual(user.authorities, ["ROLE_USER"])
        self.assertIsNone(user.refresh_token)

    async def test_role_is_shared_between_users(self) -> None:
        await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        await self.repository.create_user("bob", "B", "hashed", ["ROLE_USER"])
        async with self.db.sessionmaker() as session:
            role_count = await session.scalar(select(func.count()).select_from(Role))
        self.assertEqual(role_count, 1)

    async def test_multiple_roles(self) -> None:
        user = await self.repository.create_user(
            "admin", "Admin", "hashed", ["ROLE_USER", "ROLE_ADMIN"]
        )
        self.assertEqual(sorted(user.authorities), ["ROLE_ADMIN", "ROLE_USER"])

    async def test_duplicate_username_raises_conflict(self) -> None:
        await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        with self.assertRaises(ConflictError):
            await self.repository.create_user("alice", "Other", "other-hash", ["ROLE_USER"])

        async with self.db.sessionmaker() as session:
            stored = await session.scalar(select(User).where(User.username == "alice"))
        self.assertEqual(stored.nickname, "A")
        self.assertEqual(stored.password, "hashed")

    async def test_role_created_concurrently_is_reused(self) -> None:
        """Another signup commits the role between our lookup and our insert."""
        lookup = self.repository._get_role
        lookups = 0

        async def lookup_then_race(authority_name: str) -> Role | None:
            nonlocal lookups
            role = await lookup(authority_name)
            lookups += 1
            if lookups == 1:
                async with self.db.sessionmaker() as other:
                    other.add(Role(authority_name=authority_name))
                    await other.commit()
            return role

        with patch.object(self.repository, "_get_role", new=lookup_then_race):
            user = await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])

        self.assertEqual(user.authorities, ["ROLE_USER"])
        async with self.db.sessionmaker() as session:
            role_count = await session.scalar(select(func.count()).select_from(Role))
        self.assertEqual(role_count, 1)

    async def test_session_usable_after_conflict(self) -> None:
        await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        with self.assertRaises(ConflictError):
            await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        user = await self.repository.create_user("bob", "B", "hashed", ["ROLE_USER"])
        self.assertEqual(user.username, "bob")


class TestFindAndRefreshToken(UserRepositoryTestCase):
    """find_by_username and the single refresh-token slot."""

    async def test_find_missing_user_returns_none(self) -> None:
        self.assertIsNone(await self.repository.find_by_username("nobody"))

    async def test_find_existing_user_loads_roles(self) -> None:
        await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        async with self.db.sessionmaker() as session:
            user = await UserRepository(session).find_by_username("alice")
        self.assertIsNotNone(user)
        self.assertEqual(user.authorities, ["ROLE_USER"])

    async def test_save_refresh_token_overwrites_slot(self) -> None:
        await self.repository.create_user("alice", "A", "hashed", ["ROLE_USER"])
        self.assertTrue(await self.repository.save_refresh_token("alice", "first"))
        self.assertTrue(await self.repository.save_refresh_token("alice", "second"))
        async with self.db.sessionmaker() as session:
            user = await UserRepository(session).find_by_username("alice")
        self.assertEqual(user.refresh_token, "second")

    async def test_save_refresh_token_unknown_user(self) -> None:
        self.assertFalse(await self.repository.save_refresh_token("nobody", "token"))


class TestStoreFailures(unittest.IsolatedAsyncioTestCase):
    """Database failures other than uniqueness surface as InternalError."""

    async def test_find_wraps_database_error(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        with self.assertRaises(InternalError):
            await UserRepository(session).find_by_username("alice")

    async def test_save_refresh_token_rolls_back(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("down")))
        session.rollback = AsyncMock()
        with self.assertRaises(InternalError):
            await UserRepository(session).save_refresh_token("alice", "token")
        session.rollback.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
