"""Domain schemas. Request/response and validation."""

from user_audit.domain.schemas.user import (
    CreateUserRequest,
    PaginationParams,
    UpdateUserRequest,
    UserResponse,
)

__all__ = [
    "CreateUserRequest",
    "PaginationParams",
    "UpdateUserRequest",
    "UserResponse",
]
