"""
vault_login.api.routers

Router package.
"""

# Package marker.
