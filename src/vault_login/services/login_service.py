"""
vault_login.services.login_service

Login orchestration service (session + audit owner).

Responsibilities:
- Authenticate principals (local credentials or SSO assertion) and establish the
  session on success.
- Enforce the SSO bypass policy before any credential check.
- Record exactly one audit entry per login attempt and per logout.
- Answer per-function and per-report authorization lookups for the current user.
- Assemble the system settings snapshot and serve the session handshake (`ping`).

Every failure kind (policy, credentials, unknown user, store) resolves to a returned
`LoginOutcome`/value; nothing here raises to the caller for a rejected login.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from vault_login.auth.interfaces import (
    AuditLogger,
    Authenticator,
    Authorizer,
    ReportCatalog,
    RoleRetriever,
    SsoAuthenticator,
    SystemInitializer,
    UnitOfWork,
    UserDirectory,
)
from vault_login.auth.models import (
    ACTION_LOGIN,
    ACTION_LOGOUT,
    MSG_AUTH_FAILED,
    MSG_SSO_BYPASS_DENIED,
    MSG_STORE_UNAVAILABLE,
    MSG_TWO_STEP_REQUIRED,
    MSG_USER_NOT_FOUND,
    AuthenticationStatus,
    Function,
    LoggedInUser,
    LoginOutcome,
    ReportDescriptor,
    SystemSettings,
    normalize_principal,
)
from vault_login.db.base import utcnow
from vault_login.db.errors import StoreError
from vault_login.db.models import LENGTH_USERNAME
from vault_login.observability.logging import get_logger
from vault_login.services.audit_logger import AuditWriteError
from vault_login.session.context import SessionContext

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoginCollaborators:
    # Pluggable components; built per request in `api.deps.login_service`.
    users: UserDirectory
    authenticator: Authenticator
    sso: SsoAuthenticator
    roles: RoleRetriever
    authorizer: Authorizer
    audit: AuditLogger
    reports: ReportCatalog
    initializer: SystemInitializer


class LoginService:
    def __init__(
        self,
        *,
        ctx: SessionContext,
        uow: UnitOfWork,
        collaborators: LoginCollaborators,
        max_username_length: int = LENGTH_USERNAME,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ctx = ctx
        self._uow = uow
        self._c = collaborators
        self._max_username_length = max_username_length
        self._clock = clock

    async def login(self, principal: str | None, credentials: Sequence[str]) -> LoginOutcome:
        now = self._clock()
        principal = normalize_principal(principal, max_length=self._max_username_length)

        # Don't let local credentials get around SSO when it is enabled.
        if self._c.sso.is_sso_enabled() and not self._c.sso.is_bypass_allowed(principal):
            outcome = LoginOutcome(AuthenticationStatus.failure, MSG_SSO_BYPASS_DENIED)
        else:
            outcome = await self._authenticate(principal, credentials)

        await self._audit(now, principal, ACTION_LOGIN, outcome)
        log.info(
            "login.attempt",
            principal=principal,
            status=str(outcome.status),
            reason=outcome.message or None,
        )
        return outcome

    async def check_sso_login(self) -> LoginOutcome:
        if not self._c.sso.is_sso_enabled():
            return LoginOutcome(AuthenticationStatus.success)

        now = self._clock()
        # The gateway already authenticated this principal, so it is looked up exactly
        # as asserted: a truncated prefix could name a different account.
        principal = self._c.sso.get_principal()
        outcome = LoginOutcome.from_message(await self._login_db(principal))
        await self._audit(now, principal, ACTION_LOGIN, outcome)
        log.info(
            "login.sso",
            principal=principal,
            status=str(outcome.status),
            reason=outcome.message or None,
        )
        return outcome

    async def logout(self) -> bool:
        await self._audit(
            self._clock(),
            self._ctx.username,
            ACTION_LOGOUT,
            LoginOutcome(AuthenticationStatus.success),
        )
        self._ctx.set_username(None)
        self._ctx.set_roles(None)
        self._ctx.invalidate()
        try:
            await self._uow.commit()
        except StoreError as e:
            # The cookie is rotated regardless; the old row survives until a commit succeeds.
            log.error("logout.store_failed", error=str(e))
            await self._rollback()
        return True

    async def get_login(self) -> LoggedInUser | None:
        username = self._ctx.username
        if username is None:
            log.debug("login.current", username=None)
            return None
        try:
            user = await self._c.users.find_active_by_username(username)
        except StoreError as e:
            log.error("login.lookup_failed", username=username, error=str(e))
            return None
        if user is None:
            # Deactivated mid-session: read as logged out, leave the session as is.
            log.info("login.stale_session", username=username)
            return None
        log.debug("login.current", username=user.username)
        return LoggedInUser.from_user(user, self._ctx.roles or frozenset())

    async def get_login_authorizations(
        self, functions: Iterable[Function] | None = None
    ) -> dict[Function, bool]:
        user = await self.get_login()
        if functions is None:
            # Unspecified means every known function.
            requested = list(Function)
        else:
            requested = list(dict.fromkeys(Function(f) for f in functions))

        authz: dict[Function, bool] = {}
        for function in requested:
            # Anonymous users are still checked; the authorizer decides.
            authz[function] = await self._c.authorizer.is_authorized(user, function.value)
        log.debug("login.authorizations", authz={str(k): v for k, v in authz.items()})
        return authz

    async def get_login_reports(self) -> list[ReportDescriptor]:
        user = await self.get_login()
        return [
            report
            for report in self._c.reports.get_reports()
            if await self._c.authorizer.is_authorized(user, report.authorization_key)
        ]

    async def get_system_settings(self) -> SystemSettings:
        await self._c.initializer.verify_initialization()
        return SystemSettings(
            everyone_group=self._c.initializer.get_everyone_group(),
            sso_enabled=self._c.sso.is_sso_enabled(),
            logout_url=self._c.sso.get_logout_url() or "",
        )

    async def ping(self) -> bool:
        self._ctx.init_csrf_token()
        try:
            await self._uow.commit()
        except StoreError as e:
            log.error("ping.store_failed", error=str(e))
            await self._rollback()
        return True

    async def _authenticate(
        self, principal: str | None, credentials: Sequence[str]
    ) -> LoginOutcome:
        try:
            status = await self._c.authenticator.authenticate(principal, credentials)
        except StoreError as e:
            log.error("login.authenticator_failed", principal=principal, error=str(e))
            status = AuthenticationStatus.failure

        if status == AuthenticationStatus.success:
            return LoginOutcome.from_message(await self._login_db(principal))
        if status == AuthenticationStatus.two_step_required:
            return LoginOutcome(AuthenticationStatus.two_step_required, MSG_TWO_STEP_REQUIRED)
        return LoginOutcome(AuthenticationStatus.failure, MSG_AUTH_FAILED)

    async def _login_db(self, principal: str | None) -> str:
        """
        Attach the session to the active user `principal`. Returns "" on success,
        otherwise the failure message. User update and session write commit together;
        on a store failure the session is put back the way it was.
        """

        snapshot = self._ctx.snapshot()
        try:
            user = await self._c.users.find_active_by_username(principal)
            if user is None:
                return MSG_USER_NOT_FOUND
            user.last_login = self._clock()
            await self._c.users.save(user)
            roles = await self._c.roles.retrieve_roles(user)
            self._ctx.set_username(principal)
            self._ctx.set_roles(roles)
            await self._uow.commit()
        except StoreError as e:
            log.error("login.store_failed", principal=principal, error=str(e))
            self._ctx.restore(snapshot)
            await self._rollback()
            return MSG_STORE_UNAVAILABLE
        return ""

    async def _audit(
        self, timestamp: datetime, principal: str | None, action: str, outcome: LoginOutcome
    ) -> None:
        try:
            await self._c.audit.log(
                timestamp=timestamp,
                principal=principal,
                ip=self._ctx.ip,
                action=action,
                target="",
                success=outcome.succeeded,
                message=outcome.message,
            )
        except AuditWriteError as e:
            # Never let the audit trail change what the caller is told.
            log.error(
                "audit.write_failed",
                action=action,
                principal=principal,
                success=outcome.succeeded,
                error=str(e),
            )

    async def _rollback(self) -> None:
        try:
            await self._uow.rollback()
        except StoreError as e:
            log.error("store.rollback_failed", error=str(e))


# --- Module Notes -----------------------------------------------------------
# `_login_db` is the only writer of session identity on the success path and the only
# place `last_login` is updated; both `login` and `check_sso_login` go through it.
