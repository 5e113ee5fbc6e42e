"""Pipeline vocabulary: operation kinds, states, reason codes, results."""

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Dict, Iterable, Optional

from user_audit.domain.schemas.user import UserResponse
from user_audit.governance.audit_models import AuditAction, AuditEntry
from user_audit.security.rbac import Role


class OperationKind(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DEACTIVATE = "DEACTIVATE"
    DELETE = "DELETE"


class PipelineState(str, Enum):
    STARTED = "STARTED"
    AUTHENTICATED = "AUTHENTICATED"
    AUTHORIZED = "AUTHORIZED"
    EXECUTED = "EXECUTED"
    AUDITED = "AUDITED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class ReasonCode(str, Enum):
    # Authentication
    INVALID_TOKEN = "INVALID_TOKEN"
    EXPIRED_TOKEN = "EXPIRED_TOKEN"
    PRINCIPAL_NOT_FOUND = "PRINCIPAL_NOT_FOUND"
    PRINCIPAL_INACTIVE = "PRINCIPAL_INACTIVE"
    # Authorization
    PRINCIPAL_MISSING = "PRINCIPAL_MISSING"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    CANNOT_MODIFY_PRIVILEGED_ACCOUNT = "CANNOT_MODIFY_PRIVILEGED_ACCOUNT"
    CANNOT_GRANT_PRIVILEGED_ROLE = "CANNOT_GRANT_PRIVILEGED_ROLE"
    # Validation
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    # Domain / store conflicts
    DUPLICATE_ENTITY = "DUPLICATE_ENTITY"
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    # Infrastructure
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    AUDIT_STORE_UNAVAILABLE = "AUDIT_STORE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Outcomes that end in REJECTED; every other reason ends in FAILED.
REJECTION_REASONS: frozenset[ReasonCode] = frozenset(
    {
        ReasonCode.INVALID_TOKEN,
        ReasonCode.EXPIRED_TOKEN,
        ReasonCode.PRINCIPAL_NOT_FOUND,
        ReasonCode.PRINCIPAL_INACTIVE,
        ReasonCode.PRINCIPAL_MISSING,
        ReasonCode.INSUFFICIENT_ROLE,
        ReasonCode.CANNOT_MODIFY_PRIVILEGED_ACCOUNT,
        ReasonCode.CANNOT_GRANT_PRIVILEGED_ROLE,
        ReasonCode.PASSWORD_MISMATCH,
        ReasonCode.VALIDATION_ERROR,
    }
)


@dataclass(frozen=True)
class OperationDefinition:
    """Statically declared access requirement and audit action of one operation."""

    kind: OperationKind
    required_roles: AbstractSet[Role]
    audit_action: AuditAction
    needs_target: bool = True


def build_operation_definitions(
    mutating_roles: Iterable[Role],
) -> Dict[OperationKind, OperationDefinition]:
    """Same role requirement for every user mutation, as configured."""
    roles = frozenset(mutating_roles)
    return {
        OperationKind.CREATE: OperationDefinition(
            OperationKind.CREATE, roles, AuditAction.CREATE, needs_target=False
        ),
        OperationKind.UPDATE: OperationDefinition(
            OperationKind.UPDATE, roles, AuditAction.UPDATE
        ),
        OperationKind.DEACTIVATE: OperationDefinition(
            OperationKind.DEACTIVATE, roles, AuditAction.DEACTIVATE
        ),
        OperationKind.DELETE: OperationDefinition(
            OperationKind.DELETE, roles, AuditAction.DELETE
        ),
    }


DEFAULT_OPERATIONS = build_operation_definitions({Role.SUPERADMIN, Role.ADMIN})


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of one pipeline run. state is COMPLETED, REJECTED or FAILED;
    stages lists every state the run passed through, in order.
    audit_entry is None when the operation did not complete or the audit write failed.
    """

    kind: OperationKind
    state: PipelineState
    correlation_id: str
    stages: tuple[PipelineState, ...]
    reason: Optional[ReasonCode] = None
    detail: Optional[str] = None
    satisfying_roles: tuple[Role, ...] = ()
    value: Optional[UserResponse] = None
    audit_entry: Optional[AuditEntry] = None

    @property
    def ok(self) -> bool:
        return self.state == PipelineState.COMPLETED
