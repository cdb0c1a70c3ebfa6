"""
vault_login.auth.roles

Role derivation for an authenticated user.
"""

from __future__ import annotations

from vault_login.auth.models import Role
from vault_login.db.models import User


class GroupRoleRetriever:
    """
    Every user gets `user`; members of the admin group also get `admin`.
    Expects `user.groups` to be loaded.
    """

    def __init__(self, *, admin_group: str) -> None:
        self._admin_group = admin_group

    async def retrieve_roles(self, user: User) -> frozenset[str]:
        roles = {Role.user.value}
        if self._admin_group in user.group_names():
            roles.add(Role.admin.value)
        return frozenset(roles)
