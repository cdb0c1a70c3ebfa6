"""
vault_login.api

HTTP layer (FastAPI) that invokes the login operations.
"""
