"""
vault_login.auth.authenticators

Credential verification against the local user directory.

Responsibilities:
- Hash passwords (argon2) for bootstrap/admin flows.
- Verify a principal's first credential against its stored hash.
"""

from __future__ import annotations

from collections.abc import Sequence

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from vault_login.auth.interfaces import UserDirectory
from vault_login.auth.models import AuthenticationStatus
from vault_login.observability.logging import get_logger

log = get_logger(__name__)

_PASSWORD_HASHER = PasswordHasher()


def hash_password(password: str) -> str:
    return _PASSWORD_HASHER.hash(password)


class LocalPasswordAuthenticator:
    """
    Password check for locally managed accounts.

    Credentials are `[password, *rest]`; only the password is consulted. Unknown,
    inactive and SSO-only (no stored hash) accounts all fail the same way.
    """

    def __init__(self, *, users: UserDirectory, hasher: PasswordHasher = _PASSWORD_HASHER) -> None:
        self._users = users
        self._hasher = hasher

    async def authenticate(
        self, principal: str | None, credentials: Sequence[str]
    ) -> AuthenticationStatus:
        # StoreError from the lookup propagates; the login service maps it to FAILURE.
        user = await self._users.find_active_by_username(principal)
        if user is None or not user.password_hash or not credentials:
            return AuthenticationStatus.failure

        try:
            self._hasher.verify(user.password_hash, credentials[0])
        except (VerificationError, InvalidHashError):
            return AuthenticationStatus.failure

        if self._hasher.check_needs_rehash(user.password_hash):
            # Parameters changed since the hash was written; upgrade on next save.
            user.password_hash = self._hasher.hash(credentials[0])
            log.info("password.rehash", username=user.username)
        return AuthenticationStatus.success
