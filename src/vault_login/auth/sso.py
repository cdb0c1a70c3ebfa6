"""
vault_login.auth.sso

Single-sign-on authenticator.

Responsibilities:
- Report whether SSO is enabled and who may bypass it with local credentials.
- Extract the externally asserted principal from the request's SSO assertion.
- Expose the SSO logout URL.
"""

from __future__ import annotations

from collections.abc import Mapping

from vault_login.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from vault_login.observability.logging import get_logger
from vault_login.settings import Settings

log = get_logger(__name__)


class JwtSsoAuthenticator:
    """
    The identity gateway in front of this service authenticates the browser and
    forwards a short-lived signed assertion in a request header. The assertion's
    `sub` claim is the principal.
    """

    def __init__(self, *, settings: Settings, headers: Mapping[str, str]) -> None:
        self._settings = settings
        self._headers = headers
        self._cfg = JwtConfig.for_sso(settings)
        self._bypass = frozenset(settings.sso_bypass_users)

    def is_sso_enabled(self) -> bool:
        return self._settings.sso_enabled

    def is_bypass_allowed(self, principal: str | None) -> bool:
        return principal is not None and principal in self._bypass

    def get_principal(self) -> str | None:
        token = self._headers.get(self._settings.sso_assertion_header)
        if not token:
            log.warning("sso.assertion_missing", header=self._settings.sso_assertion_header)
            return None
        try:
            payload = decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            log.warning("sso.assertion_invalid", error=str(e))
            return None
        subject = str(payload.get("sub", ""))
        return subject or None

    def get_logout_url(self) -> str | None:
        return self._settings.sso_logout_url


# --- Module Notes -----------------------------------------------------------
# A `None` principal resolves to no user in the directory, so an invalid assertion
# surfaces as a "user not found" login failure.
