"""
vault_login.auth.interfaces

Collaborator contracts consumed by `LoginService`.

Responsibilities:
- Describe each pluggable component as a `typing.Protocol` so implementations
  (SQLAlchemy-backed, config-backed, test fakes) are interchangeable.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from vault_login.auth.models import AuthenticationStatus, LoggedInUser, ReportDescriptor
from vault_login.db.models import User


class UserDirectory(Protocol):
    async def find_active_by_username(self, username: str | None) -> User | None: ...

    async def save(self, user: User) -> None:
        """Persist changes to `user`; raises `StoreError` on failure."""
        ...


class Authenticator(Protocol):
    async def authenticate(
        self, principal: str | None, credentials: Sequence[str]
    ) -> AuthenticationStatus: ...


class SsoAuthenticator(Protocol):
    def is_sso_enabled(self) -> bool: ...

    def is_bypass_allowed(self, principal: str | None) -> bool: ...

    def get_principal(self) -> str | None: ...

    def get_logout_url(self) -> str | None: ...


class RoleRetriever(Protocol):
    async def retrieve_roles(self, user: User) -> frozenset[str]: ...


class Authorizer(Protocol):
    async def is_authorized(self, user: LoggedInUser | None, action: str) -> bool: ...


class AuditLogger(Protocol):
    async def log(
        self,
        *,
        timestamp: datetime,
        principal: str | None,
        ip: str | None,
        action: str,
        target: str,
        success: bool,
        message: str,
    ) -> None:
        """Append one audit entry; raises `AuditWriteError` if it cannot be stored."""
        ...


class ReportCatalog(Protocol):
    def get_reports(self) -> list[ReportDescriptor]: ...


class SystemInitializer(Protocol):
    async def verify_initialization(self) -> None: ...

    def get_everyone_group(self) -> str: ...


class UnitOfWork(Protocol):
    """
    Transaction boundary spanning the user directory and the session store.
    `commit` persists the current session state together with pending user changes.
    """

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


# --- Module Notes -----------------------------------------------------------
# The SSO authenticator is synchronous: it only reads configuration and the
# request's assertion header, both available when it is constructed.
