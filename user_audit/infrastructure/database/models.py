# user_audit/infrastructure/database/models.py

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from user_audit.infrastructure.database.session import Base

JsonDocument = JSON().with_variant(JSONB(), "postgresql")


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String, nullable=False)
    lastname = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    roles = Column(JsonDocument, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AuditLogModel(Base):
    """Append-only. Rows are inserted by DbAuditStore and never updated."""

    __tablename__ = "audit_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True)

    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)
    actor_id = Column(String, nullable=False)
    correlation_id = Column(String, nullable=False, index=True)
    before_state = Column(JsonDocument, nullable=True)
    after_state = Column(JsonDocument, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
