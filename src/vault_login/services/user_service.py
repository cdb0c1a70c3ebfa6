"""
vault_login.services.user_service

System initialization and group lookups.

Responsibilities:
- Ensure the everyone group, the admin group and a bootstrap administrator exist.
- Report the name of the everyone group.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vault_login.auth.authenticators import hash_password
from vault_login.db.errors import StoreError
from vault_login.db.repositories.users import GroupRepo, UserRepo
from vault_login.observability.logging import get_logger
from vault_login.settings import Settings

log = get_logger(__name__)


class UserService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._users = UserRepo(session)
        self._groups = GroupRepo(session)

    async def verify_initialization(self) -> None:
        """
        Idempotent bootstrap. Only commits when something was created, so repeated
        calls on an initialized system are read-only.
        """

        try:
            await self._bootstrap()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StoreError(str(e)) from e

    def get_everyone_group(self) -> str:
        return self._settings.everyone_group

    async def _bootstrap(self) -> None:
        created = False
        everyone = await self._groups.get_by_name(self._settings.everyone_group)
        if everyone is None:
            everyone = await self._groups.get_or_create(self._settings.everyone_group)
            created = True

        admin_group = await self._groups.get_by_name(self._settings.admin_group)
        if admin_group is None:
            admin_group = await self._groups.get_or_create(self._settings.admin_group)
            created = True

        if not await self._users.any_exist():
            admin = await self._users.create(
                username=self._settings.bootstrap_admin_username,
                password_hash=hash_password(self._settings.bootstrap_admin_password),
                full_name="Administrator",
            )
            await self._groups.add_member(everyone, admin)
            await self._groups.add_member(admin_group, admin)
            log.info("init.admin_created", username=admin.username)
            created = True

        if created:
            await self._session.commit()

