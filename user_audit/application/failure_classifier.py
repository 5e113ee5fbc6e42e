"""Failure categorization for the pipeline. Maps exceptions and policy denials to ReasonCode."""

from user_audit.application.exceptions import StoreUnavailableError
from user_audit.application.outcomes import ReasonCode
from user_audit.domain.exceptions import (
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    PasswordMismatchError,
)
from user_audit.governance.exceptions import AuditStoreUnavailableError
from user_audit.security.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    PrincipalInactiveError,
    PrincipalNotFoundError,
)
from user_audit.security.rbac import DenyReason

_EXCEPTION_REASONS: tuple[tuple[type[BaseException], ReasonCode], ...] = (
    (ExpiredTokenError, ReasonCode.EXPIRED_TOKEN),
    (InvalidTokenError, ReasonCode.INVALID_TOKEN),
    (PrincipalNotFoundError, ReasonCode.PRINCIPAL_NOT_FOUND),
    (PrincipalInactiveError, ReasonCode.PRINCIPAL_INACTIVE),
    (PasswordMismatchError, ReasonCode.PASSWORD_MISMATCH),
    (DomainValidationError, ReasonCode.VALIDATION_ERROR),
    (DuplicateEntityError, ReasonCode.DUPLICATE_ENTITY),
    (EntityNotFoundError, ReasonCode.ENTITY_NOT_FOUND),
    (StoreUnavailableError, ReasonCode.STORE_UNAVAILABLE),
    (AuditStoreUnavailableError, ReasonCode.AUDIT_STORE_UNAVAILABLE),
)


class FailureClassifier:
    """Classifies exceptions into ReasonCode. Only unknown exceptions become INTERNAL_ERROR."""

    @staticmethod
    def classify(exception: BaseException) -> ReasonCode:
        for exc_type, reason in _EXCEPTION_REASONS:
            if isinstance(exception, exc_type):
                return reason
        return ReasonCode.INTERNAL_ERROR

    @staticmethod
    def from_denial(reason: DenyReason) -> ReasonCode:
        return ReasonCode(reason.value)
