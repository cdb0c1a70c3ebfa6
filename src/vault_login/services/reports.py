"""
vault_login.services.reports

Report catalog.

Responsibilities:
- Load report descriptors (name + opaque metadata) from a JSON file, or fall back
  to the built-in catalog.
- Preserve catalog order; callers filter, they never sort.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter

from vault_login.auth.models import ReportDescriptor

_CATALOG_ADAPTER = TypeAdapter(list[ReportDescriptor])

DEFAULT_REPORTS: tuple[ReportDescriptor, ...] = (
    ReportDescriptor(
        name="AuditLog",
        metadata={"title": "Audit Log", "params": ["startDate", "endDate"]},
    ),
    ReportDescriptor(
        name="PasswordAccessAudit",
        metadata={"title": "Password Access Audit", "params": ["startDate", "endDate"]},
    ),
    ReportDescriptor(
        name="PasswordPermissions",
        metadata={"title": "Password Permissions", "params": ["passwordName"]},
    ),
    ReportDescriptor(
        name="UserGroups",
        metadata={"title": "User Groups", "params": []},
    ),
)


class JsonReportCatalog:
    def __init__(self, reports: list[ReportDescriptor]) -> None:
        self._reports = list(reports)

    @classmethod
    def from_file(cls, path: str | Path | None) -> JsonReportCatalog:
        if path is None:
            return cls(list(DEFAULT_REPORTS))
        # Raises pydantic.ValidationError on a malformed catalog; fail at startup, not per request.
        return cls(_CATALOG_ADAPTER.validate_json(Path(path).read_bytes()))

    def get_reports(self) -> list[ReportDescriptor]:
        return list(self._reports)
