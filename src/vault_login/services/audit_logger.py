"""
vault_login.services.audit_logger

Database-backed audit logger.

Responsibilities:
- Append one `AuditEntry` per call in its own session/transaction.
- Mirror each entry to the structured log stream.
- Surface storage failures as `AuditWriteError` instead of dropping entries.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vault_login.db.repositories.audit import AuditRepo
from vault_login.observability.logging import get_logger

log = get_logger("vault_login.audit")


class AuditWriteError(Exception):
    pass


class DatabaseAuditLogger:
    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def log(
        self,
        *,
        timestamp: datetime,
        principal: str | None,
        ip: str | None,
        action: str,
        target: str,
        success: bool,
        message: str,
    ) -> None:
        # The log line goes out first so the event is visible even if the insert fails.
        log.info(
            "audit",
            timestamp=timestamp.isoformat(),
            principal=principal,
            ip=ip,
            action=action,
            target=target,
            success=success,
            message=message,
        )
        try:
            async with self._session_factory() as session:
                await AuditRepo(session).add(
                    timestamp=timestamp,
                    principal=principal,
                    ip=ip,
                    action=action,
                    target=target,
                    success=success,
                    message=message,
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise AuditWriteError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# A separate session keeps audit rows independent of the login transaction: a
# rolled-back login is still recorded.
