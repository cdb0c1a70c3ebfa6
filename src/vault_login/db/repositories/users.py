"""
vault_login.db.repositories.users

Repositories for `User` and `Group` entities.

Responsibilities:
- Look up active users by username (the user directory used at login).
- Persist user updates (last-login timestamps) and bootstrap records.
- Create/fetch groups and memberships.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vault_login.db.errors import StoreError
from vault_login.db.models import Group, User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_active_by_username(self, username: str | None) -> User | None:
        if not username:
            return None
        # Groups are eager-loaded; role derivation reads them outside any lazy-load context.
        stmt = (
            select(User)
            .options(selectinload(User.groups))
            .where(User.username == username, User.active.is_(True))
        )
        try:
            return (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    async def save(self, user: User) -> None:
        try:
            self._session.add(user)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    async def create(
        self,
        *,
        username: str,
        password_hash: str | None,
        full_name: str = "",
        email: str = "",
        active: bool = True,
    ) -> User:
        user = User(
            username=username,
            password_hash=password_hash,
            full_name=full_name,
            email=email,
            active=active,
            groups=[],
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def any_exist(self) -> bool:
        stmt = select(User.id).limit(1)
        return (await self._session.execute(stmt)).first() is not None


class GroupRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_name(self, name: str) -> Group | None:
        stmt = select(Group).where(Group.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_or_create(self, name: str) -> Group:
        existing = await self.get_by_name(name)
        if existing is not None:
            return existing
        group = Group(name=name)
        self._session.add(group)
        await self._session.flush()
        return group

    async def add_member(self, group: Group, user: User) -> None:
        # `user.groups` must already be loaded (see UserRepo.find_active_by_username).
        if group not in user.groups:
            user.groups.append(group)
            await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# Only `find_active_by_username` and `save` are part of the login-time directory
# contract; the rest is used by `services.user_service` bootstrap.
