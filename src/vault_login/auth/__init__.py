"""
vault_login.auth

Authentication/authorization package.

Responsibilities:
- Domain types for login outcomes, functions and system settings.
- Collaborator interfaces consumed by the login service.
- Pluggable implementations: password authenticator, SSO, roles, authorizer.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Implementations here depend on `db` repositories but never on the API layer.
