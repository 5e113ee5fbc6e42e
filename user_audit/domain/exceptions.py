"""Domain-specific exceptions. Pure domain layer, no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class PasswordMismatchError(DomainValidationError):
    """Raised when password and confirm_password differ."""


class EntityNotFoundError(DomainError):
    """Raised when the target record of an update/delete does not exist."""


class DuplicateEntityError(DomainError):
    """Raised by a store when a uniqueness constraint (e.g. email) is violated."""
