"""
vault_login.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create tables for local development and tests.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from vault_login.db import models  # noqa: F401  # ensure models are registered on Base.metadata
from vault_login.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Dev/test bootstrap: create tables if they don't exist.
    Production deployments provision the schema out of band.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
