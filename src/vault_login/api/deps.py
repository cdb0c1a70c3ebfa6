"""
vault_login.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Resolve the client IP and load the request's `SessionContext` from its cookie.
- Compose `LoginService` with its collaborators for each request.
- Enforce the anti-forgery header on state-changing login endpoints.
"""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator

from fastapi import Depends, Header, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import HTTP_403_FORBIDDEN

from vault_login.auth.authenticators import LocalPasswordAuthenticator
from vault_login.auth.authorizer import RoleAuthorizer
from vault_login.auth.roles import GroupRoleRetriever
from vault_login.auth.sso import JwtSsoAuthenticator
from vault_login.db.repositories.users import UserRepo
from vault_login.services.audit_logger import DatabaseAuditLogger
from vault_login.services.login_service import LoginCollaborators, LoginService
from vault_login.services.reports import JsonReportCatalog
from vault_login.services.user_service import UserService
from vault_login.session.context import SessionContext
from vault_login.session.store import SessionStore, SqlUnitOfWork
from vault_login.settings import Settings

CSRF_HEADER = "x-csrf-token"


def settings_dep(request: Request) -> Settings:
    # Settings are bound to the app in `create_app`, so tests can inject their own.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `vault_login.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def report_catalog_from_app(request: Request) -> JsonReportCatalog:
    return request.app.state.report_catalog  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def client_ip(request: Request, settings: Settings = Depends(settings_dep)) -> str | None:
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            # Left-most hop is the original client when the proxy chain is trusted.
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def session_context(
    request: Request,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    ip: str | None = Depends(client_ip),
) -> SessionContext:
    return await SessionStore(session).load(
        request.cookies.get(settings.session_cookie_name), ip=ip
    )


def login_service(
    request: Request,
    ctx: SessionContext = Depends(session_context),
    session: AsyncSession = Depends(db_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
    reports: JsonReportCatalog = Depends(report_catalog_from_app),
    settings: Settings = Depends(settings_dep),
) -> LoginService:
    users = UserRepo(session)
    collaborators = LoginCollaborators(
        users=users,
        authenticator=LocalPasswordAuthenticator(users=users),
        sso=JwtSsoAuthenticator(settings=settings, headers=request.headers),
        roles=GroupRoleRetriever(admin_group=settings.admin_group),
        authorizer=RoleAuthorizer(user_actions=settings.user_permitted_actions),
        audit=DatabaseAuditLogger(session_factory=session_factory),
        reports=reports,
        initializer=UserService(session=session, settings=settings),
    )
    return LoginService(
        ctx=ctx,
        uow=SqlUnitOfWork(session=session, store=SessionStore(session), ctx=ctx),
        collaborators=collaborators,
        max_username_length=settings.max_username_length,
    )


def require_csrf(
    ctx: SessionContext = Depends(session_context),
    x_csrf_token: str | None = Header(default=None),
) -> None:
    # Token is issued by /v1/ping; compare in constant time.
    if (
        ctx.csrf_token is None
        or x_csrf_token is None
        or not secrets.compare_digest(ctx.csrf_token, x_csrf_token)
    ):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Invalid anti-forgery token")


def set_session_cookie(response: Response, ctx: SessionContext, settings: Settings) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        ctx.session_id,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request: `session_context`, `login_service` and
# `require_csrf` all see the same AsyncSession and SessionContext instance.
