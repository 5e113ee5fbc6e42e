"""Audit store protocol. Governance layer depends on this; infrastructure implements it."""

from typing import Protocol

from user_audit.governance.audit_models import AuditEntry


class AuditStore(Protocol):
    """Append-only persistence for audit entries. No update, no delete."""

    async def append(self, entry: AuditEntry) -> None:
        """Persist an immutable audit entry. Raise AuditStoreUnavailableError on failure."""
        ...
