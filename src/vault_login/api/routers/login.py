"""
vault_login.api.routers.login

Login/session endpoints.

Responsibilities:
- Expose the login service operations over JSON.
- Keep the session cookie in step with the session id after state-changing calls.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from vault_login.api.deps import (
    CSRF_HEADER,
    login_service,
    require_csrf,
    session_context,
    set_session_cookie,
    settings_dep,
)
from vault_login.auth.models import AuthenticationStatus, Function, LoggedInUser
from vault_login.services.login_service import LoginService
from vault_login.session.context import SessionContext
from vault_login.settings import Settings

router = APIRouter(prefix="/v1", tags=["login"])


class LoginRequest(BaseModel):
    principal: str | None = None
    credentials: list[str] = Field(default_factory=list)


class LoginResponse(BaseModel):
    status: AuthenticationStatus
    message: str


class LoggedInUserResponse(BaseModel):
    username: str
    full_name: str
    email: str
    last_login: datetime | None
    roles: list[str]

    @classmethod
    def from_user(cls, user: LoggedInUser) -> LoggedInUserResponse:
        return cls(
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            last_login=user.last_login,
            roles=sorted(user.roles),
        )


class AuthorizationsRequest(BaseModel):
    # Omitted/null means "every function".
    functions: list[Function] | None = None


class ReportResponse(BaseModel):
    name: str
    metadata: dict[str, Any]


class SystemSettingsResponse(BaseModel):
    everyone_group: str
    sso_enabled: bool
    logout_url: str


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(require_csrf)])
async def login(
    body: LoginRequest,
    response: Response,
    svc: LoginService = Depends(login_service),
    ctx: SessionContext = Depends(session_context),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    outcome = await svc.login(body.principal, body.credentials)
    set_session_cookie(response, ctx, settings)
    return LoginResponse(status=outcome.status, message=outcome.message)


@router.post("/login/sso", response_model=LoginResponse, dependencies=[Depends(require_csrf)])
async def check_sso_login(
    response: Response,
    svc: LoginService = Depends(login_service),
    ctx: SessionContext = Depends(session_context),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    outcome = await svc.check_sso_login()
    set_session_cookie(response, ctx, settings)
    return LoginResponse(status=outcome.status, message=outcome.message)


@router.post("/logout", dependencies=[Depends(require_csrf)])
async def logout(
    response: Response,
    svc: LoginService = Depends(login_service),
    ctx: SessionContext = Depends(session_context),
    settings: Settings = Depends(settings_dep),
) -> bool:
    result = await svc.logout()
    # Session id was rotated by invalidate(); hand the client the new one.
    set_session_cookie(response, ctx, settings)
    return result


@router.get("/login", response_model=LoggedInUserResponse | None)
async def get_login(svc: LoginService = Depends(login_service)) -> LoggedInUserResponse | None:
    user = await svc.get_login()
    return None if user is None else LoggedInUserResponse.from_user(user)


@router.post("/login/authorizations")
async def get_login_authorizations(
    body: AuthorizationsRequest,
    svc: LoginService = Depends(login_service),
) -> dict[str, bool]:
    authz = await svc.get_login_authorizations(body.functions)
    return {function.value: allowed for function, allowed in authz.items()}


@router.get("/login/reports", response_model=list[ReportResponse])
async def get_login_reports(svc: LoginService = Depends(login_service)) -> list[ReportResponse]:
    reports = await svc.get_login_reports()
    return [ReportResponse(name=r.name, metadata=r.metadata) for r in reports]


@router.get("/system-settings", response_model=SystemSettingsResponse)
async def get_system_settings(
    svc: LoginService = Depends(login_service),
) -> SystemSettingsResponse:
    s = await svc.get_system_settings()
    return SystemSettingsResponse(
        everyone_group=s.everyone_group, sso_enabled=s.sso_enabled, logout_url=s.logout_url
    )


@router.post("/ping")
async def ping(
    response: Response,
    svc: LoginService = Depends(login_service),
    ctx: SessionContext = Depends(session_context),
    settings: Settings = Depends(settings_dep),
) -> bool:
    result = await svc.ping()
    set_session_cookie(response, ctx, settings)
    if ctx.csrf_token is not None:
        response.headers[CSRF_HEADER] = ctx.csrf_token
    return result


# --- Module Notes -----------------------------------------------------------
# Clients call /v1/ping first to obtain the session cookie and anti-forgery token,
# then send the token back in `x-csrf-token` on login/logout calls.
