"""
tests.test_session_store

Server-side session persistence and the SQL unit of work.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vault_login.db.errors import StoreError
from vault_login.db.models import WebSession
from vault_login.db.repositories.users import UserRepo
from vault_login.session.context import SessionContext
from vault_login.session.store import SessionStore, SqlUnitOfWork


def test_context_invalidate_rotates_id_and_clears_identity() -> None:
    ctx = SessionContext(ip="10.1.1.1", username="alice", roles=frozenset({"user"}))
    ctx.init_csrf_token()
    original = ctx.session_id

    ctx.invalidate()

    assert ctx.session_id != original
    assert ctx.replaced_session_id == original
    assert ctx.username is None
    assert ctx.roles is None
    assert ctx.csrf_token is None
    assert ctx.ip == "10.1.1.1"


@pytest.mark.asyncio
async def test_unknown_session_id_starts_anonymous(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        ctx = await SessionStore(session).load("no-such-session", ip="10.1.1.1")

    assert ctx.username is None
    assert ctx.session_id != "no-such-session"
    assert ctx.ip == "10.1.1.1"


@pytest.mark.asyncio
async def test_unit_of_work_persists_session_with_user_changes(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        await UserRepo(session).create(username="alice", password_hash=None)
        await session.commit()

    async with session_factory() as session:
        store = SessionStore(session)
        ctx = await store.load(None, ip="10.1.1.1")
        user = await UserRepo(session).find_active_by_username("alice")
        assert user is not None
        user.last_login = user.date_created
        ctx.set_username("alice")
        ctx.set_roles(frozenset({"user", "admin"}))
        token = ctx.init_csrf_token()
        await SqlUnitOfWork(session=session, store=store, ctx=ctx).commit()
        session_id = ctx.session_id

    async with session_factory() as session:
        loaded = await SessionStore(session).load(session_id, ip="10.9.9.9")
        user = await UserRepo(session).find_active_by_username("alice")

    assert loaded.username == "alice"
    assert loaded.roles == frozenset({"user", "admin"})
    assert loaded.csrf_token == token
    # IP is per request, never taken from the stored row.
    assert loaded.ip == "10.9.9.9"
    assert user is not None and user.last_login is not None


@pytest.mark.asyncio
async def test_unit_of_work_drops_old_row_after_invalidate(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        store = SessionStore(session)
        ctx = SessionContext(username="alice", roles=frozenset({"user"}))
        uow = SqlUnitOfWork(session=session, store=store, ctx=ctx)
        await uow.commit()
        old_id = ctx.session_id

        ctx.invalidate()
        await uow.commit()

    async with session_factory() as session:
        assert await session.get(WebSession, old_id) is None
        row = await session.get(WebSession, ctx.session_id)

    assert row is not None
    assert row.username is None
    assert row.roles is None
    assert ctx.replaced_session_id is None


class _FailingStore(SessionStore):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.fail = True

    async def save(self, ctx: SessionContext) -> None:
        await super().save(ctx)
        if self.fail:
            raise OperationalError("COMMIT", None, Exception("disk I/O error"))


@pytest.mark.asyncio
async def test_failed_commit_keeps_old_row_scheduled_for_delete(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        ctx = SessionContext(username="alice", roles=frozenset({"user"}))
        await SqlUnitOfWork(session=session, store=SessionStore(session), ctx=ctx).commit()
        old_id = ctx.session_id

    async with session_factory() as session:
        store = _FailingStore(session)
        uow = SqlUnitOfWork(session=session, store=store, ctx=ctx)
        ctx.invalidate()

        with pytest.raises(StoreError):
            await uow.commit()
        await uow.rollback()

        assert ctx.replaced_session_id == old_id
        async with session_factory() as other:
            assert await other.get(WebSession, old_id) is not None

        store.fail = False
        await uow.commit()

    assert ctx.replaced_session_id is None
    async with session_factory() as session:
        assert await session.get(WebSession, old_id) is None
