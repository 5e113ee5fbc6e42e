"""Domain models. Pure business entities."""

from user_audit.domain.models.user import USER_ENTITY_TYPE, UserRecord, UserSnapshot

__all__ = [
    "USER_ENTITY_TYPE",
    "UserRecord",
    "UserSnapshot",
]
