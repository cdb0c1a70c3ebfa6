"""
vault_login.db.errors

Persistence-layer exceptions.

Responsibilities:
- Give services a backend-neutral error to catch instead of SQLAlchemy's.
"""

from __future__ import annotations


class StoreError(Exception):
    """Raised when the user directory or session store cannot read/write."""


# --- Module Notes -----------------------------------------------------------
# Repositories wrap `SQLAlchemyError` into `StoreError` with `raise ... from e`.
