"""Immutable audit entry model. Domain-level immutability."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from user_audit.domain.models.user import UserSnapshot


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DEACTIVATE = "DEACTIVATE"


@dataclass(frozen=True)
class AuditEntry:
    """
    Immutable audit entry: who (actor_id) did what (action) to which entity,
    when (UTC), what changed (before/after), and the request correlation_id.
    """

    id: str
    entity_type: str
    entity_id: str
    action: AuditAction
    actor_id: str
    correlation_id: str
    timestamp: datetime
    before_state: Optional[UserSnapshot] = None
    after_state: Optional[UserSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON logging and storage."""
        return {
            "id": self.id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action.value,
            "actor_id": self.actor_id,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "before_state": self.before_state.to_dict() if self.before_state else None,
            "after_state": self.after_state.to_dict() if self.after_state else None,
        }
