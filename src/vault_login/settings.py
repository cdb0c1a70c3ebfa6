"""
vault_login.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the login service.
- Hide secrets from repr/logging (bootstrap password, SSO signing secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Enterprise pattern:
    - Strict env-driven configuration
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="VAULT_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "vault-login"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./vault.db"

    # Users / groups
    max_username_length: int = 64
    everyone_group: str = "Everyone"
    admin_group: str = "Administrators"
    bootstrap_admin_username: str = "admin"
    bootstrap_admin_password: str = Field(default="admin", repr=False)

    # SSO (assertions are HS256 JWTs minted by the upstream identity gateway)
    sso_enabled: bool = False
    sso_bypass_users: list[str] = Field(default_factory=lambda: ["admin"])
    sso_assertion_header: str = "x-sso-assertion"
    sso_jwt_alg: str = "HS256"
    sso_jwt_issuer: str = "vault-sso-gateway"
    sso_jwt_audience: str = "vault-login"
    sso_jwt_secret: str = Field(default="dev-sso-secret-change-me-in-every-deployment", repr=False)
    sso_logout_url: str | None = None

    # Authorization: action keys granted to the plain "user" role.
    user_permitted_actions: list[str] = Field(
        default_factory=lambda: [
            "ADD_TEMPLATE",
            "UPDATE_TEMPLATE",
            "VIEW_REPORT_PasswordAccessAudit",
            "VIEW_REPORT_PasswordPermissions",
        ]
    )

    # Reports
    reports_file: str | None = None

    # HTTP session plumbing
    session_cookie_name: str = "vault_session"
    session_cookie_secure: bool = False
    trust_forwarded_for: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# List-valued settings (bypass users, permitted actions) are read from env as JSON,
# e.g. VAULT_SSO_BYPASS_USERS='["admin", "breakglass"]'.
