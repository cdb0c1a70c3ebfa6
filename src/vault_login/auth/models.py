"""
vault_login.auth.models

Auth domain models.

Responsibilities:
- Define the authentication outcome types (`AuthenticationStatus`, `LoginOutcome`).
- Define permission-gated capabilities (`Function`) and report keys.
- Define read models returned to callers (`LoggedInUser`, `SystemSettings`,
  `ReportDescriptor`).
- Principal normalization (username truncation).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vault_login.db.models import LENGTH_USERNAME, User

# Reports are authorized by this prefix followed by the report name.
VIEW_REPORT_PREFIX = "VIEW_REPORT_"

ACTION_LOGIN = "login"
ACTION_LOGOUT = "logout"

MSG_SSO_BYPASS_DENIED = "bypass SSO not allowed"
MSG_TWO_STEP_REQUIRED = "two-step authentication required"
MSG_AUTH_FAILED = "authentication failed"
MSG_USER_NOT_FOUND = "user not found"
MSG_STORE_UNAVAILABLE = "user store unavailable"


class AuthenticationStatus(enum.StrEnum):
    success = "SUCCESS"
    failure = "FAILURE"
    two_step_required = "TWO_STEP_REQUIRED"


class Function(enum.StrEnum):
    # Values are the authorization keys passed to the authorizer; treat as stable.
    add_user = "ADD_USER"
    update_user = "UPDATE_USER"
    add_group = "ADD_GROUP"
    update_group = "UPDATE_GROUP"
    add_template = "ADD_TEMPLATE"
    update_template = "UPDATE_TEMPLATE"
    bypass_password_permissions = "BYPASS_PASSWORD_PERMISSIONS"
    bypass_template_sharing = "BYPASS_TEMPLATE_SHARING"
    unblock_ip = "UNBLOCK_IP"


class Role(enum.StrEnum):
    user = "user"
    admin = "admin"


@dataclass(frozen=True, slots=True)
class LoginOutcome:
    """
    Result of a login attempt: status plus the fixed reason for that branch.
    `message` is empty on success.
    """

    status: AuthenticationStatus
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is AuthenticationStatus.success

    @classmethod
    def from_message(cls, message: str) -> LoginOutcome:
        # Database login reports failure through a non-empty message.
        if message:
            return cls(AuthenticationStatus.failure, message)
        return cls(AuthenticationStatus.success)


@dataclass(frozen=True, slots=True)
class LoggedInUser:
    """
    The current user as seen by callers: the active user record decorated with the
    roles held by the session.
    """

    username: str
    full_name: str
    email: str
    last_login: datetime | None
    roles: frozenset[str]

    @classmethod
    def from_user(cls, user: User, roles: frozenset[str]) -> LoggedInUser:
        return cls(
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            last_login=user.last_login,
            roles=roles,
        )

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(frozen=True, slots=True)
class SystemSettings:
    everyone_group: str
    sso_enabled: bool
    logout_url: str


class ReportDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def authorization_key(self) -> str:
        return VIEW_REPORT_PREFIX + self.name


def normalize_principal(principal: str | None, *, max_length: int = LENGTH_USERNAME) -> str | None:
    # Excess characters are dropped silently; None passes through.
    if principal is not None and len(principal) > max_length:
        return principal[:max_length]
    return principal


# --- Module Notes -----------------------------------------------------------
# `LoginOutcome.status` is the single source of truth for whether a session was
# established; `message` is what goes to the audit trail.
