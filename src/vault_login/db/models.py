"""
vault_login.db.models

Persistence schema for the login service.

Responsibilities:
- Define ORM models:
  - User: local account record (credentials hash, active flag, last login)
  - Group: named user groups (everyone group, administrators)
  - WebSession: server-side session state keyed by the session cookie
  - AuditEntry: append-only login/logout audit trail
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, ForeignKey, Index, String, Table, Text, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vault_login.db.base import Base, utcnow

# Column widths double as input limits (principals are truncated to LENGTH_USERNAME).
LENGTH_USERNAME = 64
LENGTH_FULLNAME = 100
LENGTH_EMAIL = 100
LENGTH_GROUPNAME = 100


user_groups = Table(
    "user_groups",
    Base.metadata,
    Column("user_id", SAUuid(as_uuid=True), ForeignKey("users.id"), primary_key=True),
    Column("group_id", SAUuid(as_uuid=True), ForeignKey("groups.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(String(LENGTH_USERNAME), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(LENGTH_FULLNAME), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(LENGTH_EMAIL), nullable=False, default="")

    # argon2 encoded hash; None for accounts that only log in through SSO.
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(nullable=False, default=True)

    date_created: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    groups: Mapped[list[Group]] = relationship(secondary=user_groups, back_populates="users")

    def group_names(self) -> frozenset[str]:
        return frozenset(g.name for g in self.groups)


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(LENGTH_GROUPNAME), nullable=False, unique=True)

    users: Mapped[list[User]] = relationship(secondary=user_groups, back_populates="groups")


class WebSession(Base):
    __tablename__ = "web_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(LENGTH_USERNAME), nullable=True)
    # Stored as a sorted list; None when no one is logged in.
    roles: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    csrf_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    client_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


class AuditEntry(Base):
    __tablename__ = "audit_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    timestamp: Mapped[datetime] = mapped_column(nullable=False, index=True)
    principal: Mapped[str | None] = mapped_column(String(LENGTH_USERNAME), nullable=True, index=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    target: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    success: Mapped[bool] = mapped_column(nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (Index("ix_audit_principal_timestamp", "principal", "timestamp"),)


# --- Module Notes -----------------------------------------------------------
# Roles are not columns on `users`: they are derived at login time by the
# role retriever and live only on the web session.
