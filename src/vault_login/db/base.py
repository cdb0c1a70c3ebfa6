"""
vault_login.db.base

SQLAlchemy declarative base.

Responsibilities:
- Provide a shared DeclarativeBase for users, groups, sessions and audit rows.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    # Persist naive UTC timestamps; sqlite drops tzinfo anyway.
    return datetime.now(tz=UTC).replace(tzinfo=None)
