"""
vault_login.session.store

Server-side session persistence.

Responsibilities:
- Load a `SessionContext` for the session cookie presented by a request.
- Persist session state (username, roles, anti-forgery token) as `WebSession` rows.
- Provide the SQL-backed unit of work that commits user and session changes together.
"""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vault_login.db.base import utcnow
from vault_login.db.errors import StoreError
from vault_login.db.models import WebSession
from vault_login.session.context import SessionContext


class SessionStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def load(self, session_id: str | None, *, ip: str | None) -> SessionContext:
        # Unknown or missing ids start a fresh anonymous session; it is only written
        # once something commits.
        if not session_id:
            return SessionContext(ip=ip)
        row = await self._session.get(WebSession, session_id)
        if row is None:
            return SessionContext(ip=ip)
        return SessionContext(
            session_id=row.id,
            ip=ip,
            username=row.username,
            roles=None if row.roles is None else frozenset(row.roles),
            csrf_token=row.csrf_token,
        )

    async def save(self, ctx: SessionContext) -> None:
        if ctx.replaced_session_id is not None:
            await self._session.execute(
                delete(WebSession).where(WebSession.id == ctx.replaced_session_id)
            )

        row = await self._session.get(WebSession, ctx.session_id)
        if row is None:
            row = WebSession(id=ctx.session_id)
            self._session.add(row)
        row.username = ctx.username
        row.roles = None if ctx.roles is None else sorted(ctx.roles)
        row.csrf_token = ctx.csrf_token
        row.client_ip = ctx.ip
        row.updated_at = utcnow()
        await self._session.flush()


class SqlUnitOfWork:
    """
    Commits the request's session state in the same transaction as any pending
    user-record changes, so a login either fully applies or leaves the session
    anonymous.
    """

    def __init__(self, *, session: AsyncSession, store: SessionStore, ctx: SessionContext) -> None:
        self._session = session
        self._store = store
        self._ctx = ctx

    async def commit(self) -> None:
        try:
            await self._store.save(self._ctx)
            await self._session.commit()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        # Only a committed delete retires the old id; until then a retry must repeat it.
        self._ctx.replaced_session_id = None

    async def rollback(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# The session row holds roles as a JSON list; `SessionContext` exposes them as a
# frozenset so callers never mutate session roles in place.
