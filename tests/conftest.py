"""
tests.conftest

Shared fixtures.

Responsibilities:
- Provide a fresh `Harness` of in-memory collaborators per test.
- Provide a file-backed sqlite engine/sessionmaker for repository tests.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tests.fakes import Harness
from vault_login.db.init_db import init_db
from vault_login.db.session import create_engine, create_sessionmaker
from vault_login.settings import Settings


@pytest.fixture
def harness() -> Harness:
    return Harness()


@pytest.fixture
def db_settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'vault.db'}",
        bootstrap_admin_password="correct horse battery staple",
    )


@pytest_asyncio.fixture
async def engine(db_settings: Settings) -> AsyncIterator[AsyncEngine]:
    eng = create_engine(db_settings)
    await init_db(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)
