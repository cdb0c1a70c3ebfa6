"""
vault_login.auth.authorizer

Role-based authorizer for named functions and report keys.

Responsibilities:
- Decide whether a (possibly anonymous) user may perform an action key such as
  `ADD_USER` or `VIEW_REPORT_AuditLog`.
"""

from __future__ import annotations

from collections.abc import Iterable

from vault_login.auth.models import LoggedInUser, Role


class RoleAuthorizer:
    def __init__(self, *, user_actions: Iterable[str]) -> None:
        self._user_actions = frozenset(user_actions)

    async def is_authorized(self, user: LoggedInUser | None, action: str) -> bool:
        # Anonymous callers hold no permissions.
        if user is None:
            return False
        if user.has_role(Role.admin):
            return True
        return user.has_role(Role.user) and action in self._user_actions


# --- Module Notes -----------------------------------------------------------
# The set of user-level actions comes from `Settings.user_permitted_actions`.
