"""
vault_login.observability

Logging and request-context helpers.
"""
