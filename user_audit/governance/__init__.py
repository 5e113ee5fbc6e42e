"""Governance: append-only audit trail for user mutations. No FastAPI."""

from user_audit.governance.audit_models import AuditAction, AuditEntry
from user_audit.governance.audit_recorder import AuditRecorder
from user_audit.governance.audit_repository import AuditStore
from user_audit.governance.exceptions import AuditStoreUnavailableError, GovernanceError

__all__ = [
    "AuditAction",
    "AuditEntry",
    "AuditRecorder",
    "AuditStore",
    "AuditStoreUnavailableError",
    "GovernanceError",
]
