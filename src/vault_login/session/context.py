"""
vault_login.session.context

Per-request session state.

Responsibilities:
- Hold the identity bound to a browser session (username + roles), the client IP
  and the anti-forgery token.
- Provide the session lifecycle operations used by the login service
  (`invalidate`, `init_csrf_token`).

One `SessionContext` is created per request and passed explicitly to the service;
nothing here is global, so concurrent sessions cannot observe each other.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


@dataclass(slots=True)
class SessionSnapshot:
    username: str | None
    roles: frozenset[str] | None


@dataclass(slots=True)
class SessionContext:
    session_id: str = field(default_factory=new_session_id)
    ip: str | None = None
    username: str | None = None
    roles: frozenset[str] | None = None
    csrf_token: str | None = None
    # Set by `invalidate()`; the store deletes this row when saving and the unit of
    # work clears it once that delete has committed.
    replaced_session_id: str | None = None

    def set_username(self, username: str | None) -> None:
        self.username = username

    def set_roles(self, roles: frozenset[str] | None) -> None:
        self.roles = None if roles is None else frozenset(roles)

    def invalidate(self) -> None:
        # Rotate the id so a captured cookie is useless after logout.
        if self.replaced_session_id is None:
            self.replaced_session_id = self.session_id
        self.session_id = new_session_id()
        self.username = None
        self.roles = None
        self.csrf_token = None

    def init_csrf_token(self) -> str:
        if self.csrf_token is None:
            self.csrf_token = secrets.token_urlsafe(32)
        return self.csrf_token

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(username=self.username, roles=self.roles)

    def restore(self, snapshot: SessionSnapshot) -> None:
        self.username = snapshot.username
        self.roles = snapshot.roles
