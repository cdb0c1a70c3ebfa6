"""
vault_login.services

Service-layer package.

Responsibilities:
- Own transaction boundaries for login/logout.
- Orchestrate calls across the directory, authenticators, authorizer and audit log.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake collaborators.
