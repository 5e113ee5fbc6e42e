"""DB-backed audit store. Inserts into audit_logs; exposes no update or delete."""

import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_audit.governance.audit_models import AuditEntry
from user_audit.governance.exceptions import AuditStoreUnavailableError
from user_audit.infrastructure.database.models import AuditLogModel


def _to_orm(entry: AuditEntry) -> AuditLogModel:
    return AuditLogModel(
        id=uuid.UUID(entry.id),
        entity_type=entry.entity_type,
        entity_id=entry.entity_id,
        action=entry.action.value,
        actor_id=entry.actor_id,
        correlation_id=entry.correlation_id,
        before_state=entry.before_state.to_dict() if entry.before_state else None,
        after_state=entry.after_state.to_dict() if entry.after_state else None,
        timestamp=entry.timestamp,
    )


class DbAuditStore:
    """Implements AuditStore protocol. Own session per append so a failed audit write cannot touch the user mutation."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: AuditEntry) -> None:
        try:
            async with self._session_factory() as session:
                session.add(_to_orm(entry))
                await session.commit()
        except SQLAlchemyError as e:
            raise AuditStoreUnavailableError(f"Audit store append failed: {e}") from e
