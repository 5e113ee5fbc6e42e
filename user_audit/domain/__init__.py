"""Domain layer: models, schemas, exceptions. Pure business logic only."""

from user_audit.domain.exceptions import (
    DomainError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    PasswordMismatchError,
)
from user_audit.domain.models import USER_ENTITY_TYPE, UserRecord, UserSnapshot
from user_audit.domain.schemas import (
    CreateUserRequest,
    PaginationParams,
    UpdateUserRequest,
    UserResponse,
)

__all__ = [
    "CreateUserRequest",
    "DomainError",
    "DomainValidationError",
    "DuplicateEntityError",
    "EntityNotFoundError",
    "PaginationParams",
    "PasswordMismatchError",
    "UpdateUserRequest",
    "USER_ENTITY_TYPE",
    "UserRecord",
    "UserResponse",
    "UserSnapshot",
]
