"""Credential store: persistence of users, their roles, and the refresh-token slot."""

import logging

from sqlalchemy import Insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from account_api.core.errors import ConflictError, InternalError
from account_api.models import Role, User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    User store over an AsyncSession.

    Uniqueness of usernames and role names is left to the database
    constraints; a duplicate username surfaces as ConflictError. Any other
    database failure is rolled back and raised as InternalError.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_username(self, username: str) -> User | None:
        try:
            result = await self._session.execute(select(User).where(User.username == username))
        except SQLAlchemyError as e:
            raise InternalError("Failed to load user.", cause=e) from e
        return result.scalar_one_or_none()

    async def _get_role(self, authority_name: str) -> Role | None:
        result = await self._session.execute(
            select(Role).where(Role.authority_name == authority_name)
        )
        return result.scalar_one_or_none()

    def _insert_role_if_absent(self, authority_name: str) -> Insert:
        dialect = self._session.get_bind().dialect.name
        insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
        return (
            insert(Role)
            .values(authority_name=authority_name)
            .on_conflict_do_nothing(index_elements=["authority_name"])
        )

    async def find_or_create_role(self, authority_name: str) -> Role:
        """
        Return the role with this name, inserting it if absent. Does not commit.

        The insert is ON CONFLICT DO NOTHING followed by a re-select, so a role
        created by a concurrent signup is reused instead of failing the transaction.
        """
        role = await self._get_role(authority_name)
        if role is not None:
            return role
        await self._session.execute(self._insert_role_if_absent(authority_name))
        logger.info("Creating role", extra={"authority_name": authority_name})
        role = await self._get_role(authority_name)
        if role is None:
            raise InternalError(f"Role '{authority_name}' could not be created.")
        return role

    async def create_user(
        self,
        username: str,
        nickname: str,
        hashed_password: str,
        authorities: list[str],
    ) -> User:
        """
        Create a user linked to the given roles in one transaction.

        Roles are found or created by name. Raises ConflictError when the
        username is taken.
        """
        try:
            roles = [await self.find_or_create_role(name) for name in dict.fromkeys(authorities)]
            user = User(
                username=username,
                nickname=nickname,
                password=hashed_password,
                roles=roles,
            )
            self._session.add(user)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            if await self.find_by_username(username) is not None:
                raise ConflictError(f"Username '{username}' already exists.", cause=e) from e
            raise InternalError("Failed to create user.", cause=e) from e
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise InternalError("Failed to create user.", cause=e) from e

        await self._session.refresh(user, attribute_names=["roles"])
        return user

    async def save_refresh_token(self, username: str, refresh_token: str | None) -> bool:
        """Overwrite the user's refresh-token slot. Returns False if no such user."""
        try:
            result = await self._session.execute(
                update(User).where(User.username == username).values(refresh_token=refresh_token)
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise InternalError("Failed to store refresh token.", cause=e) from e
        return result.rowcount > 0
