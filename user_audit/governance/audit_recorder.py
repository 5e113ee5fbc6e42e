"""Append-only audit recording for user mutations. No FastAPI."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from user_audit.domain.models.user import UserSnapshot
from user_audit.governance.audit_models import AuditAction, AuditEntry
from user_audit.governance.audit_repository import AuditStore
from user_audit.governance.exceptions import AuditStoreUnavailableError

logger = logging.getLogger(__name__)


class AuditRecorder:
    """
    Builds an immutable AuditEntry once the outcome of a mutation is known and
    appends it via the store. Exposes no way to change or remove an entry.
    """

    def __init__(self, store: AuditStore) -> None:
        self._store = store

    async def record(
        self,
        *,
        entity_type: str,
        entity_id: str,
        action: AuditAction,
        actor_id: str,
        correlation_id: str,
        before_state: Optional[UserSnapshot] = None,
        after_state: Optional[UserSnapshot] = None,
    ) -> AuditEntry:
        """Write an audit entry. Timestamp is UTC. Raises AuditStoreUnavailableError."""
        entry = AuditEntry(
            id=str(uuid.uuid4()),
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            correlation_id=correlation_id,
            timestamp=datetime.now(timezone.utc),
            before_state=before_state,
            after_state=after_state,
        )
        try:
            await self._store.append(entry)
        except AuditStoreUnavailableError:
            raise
        except Exception as e:
            raise AuditStoreUnavailableError(f"Audit write failed: {e}") from e
        logger.info(
            "audit_recorded",
            extra={
                "correlation_id": correlation_id,
                "audit_id": entry.id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action.value,
            },
        )
        return entry
