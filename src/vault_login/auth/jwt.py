"""
vault_login.auth.jwt

JWT helpers for SSO assertions.

Responsibilities:
- Decode and validate assertions minted by the upstream SSO gateway with strict
  claim requirements (iss/aud/exp/iat/sub).
- Issue assertions for local/dev scenarios and tests.

Note:
- Production gateways often sign with RS256 + JWKS; this service uses HS256 with a
  shared secret for simplicity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from vault_login.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def for_sso(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.sso_jwt_alg,
            issuer=settings.sso_jwt_issuer,
            audience=settings.sso_jwt_audience,
            secret=settings.sso_jwt_secret,
        )


class JwtValidationError(Exception):
    pass


def issue_assertion(
    *,
    cfg: JwtConfig,
    subject: str,
    ttl: timedelta = timedelta(minutes=5),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# Decoding is used by `auth.sso.JwtSsoAuthenticator`; issuing is used by tests and
# by gateways running in dev mode.
