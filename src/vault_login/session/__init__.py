"""
vault_login.session

Per-request session state and its server-side store.
"""
