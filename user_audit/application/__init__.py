# Application layer: services that orchestrate domain, security, governance and infrastructure.

from user_audit.application.exceptions import ApplicationError, StoreUnavailableError
from user_audit.application.failure_classifier import FailureClassifier
from user_audit.application.outcomes import (
    DEFAULT_OPERATIONS,
    OperationDefinition,
    OperationKind,
    OperationResult,
    PipelineState,
    ReasonCode,
    build_operation_definitions,
)
from user_audit.application.pipeline import OperationPipeline
from user_audit.application.user_queries import UserQueryService
from user_audit.application.user_store import NewUser, UserStore

__all__ = [
    "ApplicationError",
    "DEFAULT_OPERATIONS",
    "FailureClassifier",
    "NewUser",
    "OperationDefinition",
    "OperationKind",
    "OperationPipeline",
    "OperationResult",
    "PipelineState",
    "ReasonCode",
    "StoreUnavailableError",
    "UserQueryService",
    "UserStore",
    "build_operation_definitions",
]
