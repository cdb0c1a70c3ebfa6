"""
vault_login.db.repositories.audit

Repository for `AuditEntry` entities.

Responsibilities:
- Append audit entries (login/logout attempts).
- Query the audit trail for a principal, newest first.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from vault_login.db.models import AuditEntry


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        timestamp: datetime,
        principal: str | None,
        ip: str | None,
        action: str,
        target: str,
        success: bool,
        message: str,
    ) -> AuditEntry:
        # Audit entries are append-only (no update/delete) in normal operation.
        entry = AuditEntry(
            timestamp=timestamp,
            principal=principal,
            ip=ip,
            action=action,
            target=target,
            success=success,
            message=message,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def list_recent(
        self, *, principal: str | None = None, limit: int = 200
    ) -> list[AuditEntry]:
        stmt = select(AuditEntry)
        if principal is not None:
            stmt = stmt.where(AuditEntry.principal == principal)
        stmt = stmt.order_by(desc(AuditEntry.timestamp)).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Writes go through `services.audit_logger.DatabaseAuditLogger`, which owns the
# transaction so audit rows survive a rolled-back login.
