"""FastAPI dependency injection: stores, policy, pipeline, credentials, correlation_id."""

import logging
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_audit.application.outcomes import build_operation_definitions
from user_audit.application.pipeline import OperationPipeline
from user_audit.application.user_queries import UserQueryService
from user_audit.application.user_store import UserStore
from user_audit.config.settings import AppSettings, get_settings
from user_audit.governance.audit_recorder import AuditRecorder
from user_audit.governance.audit_repository import AuditStore
from user_audit.infrastructure.database.audit_store_db import DbAuditStore
from user_audit.infrastructure.database.session import create_session_factory
from user_audit.infrastructure.database.user_store_db import DbUserStore
from user_audit.security.credentials import JwtCredentialValidator
from user_audit.security.identity import IdentityResolver, ValidatedCredential
from user_audit.security.passwords import PasswordHasher
from user_audit.security.rbac import RolePolicy, parse_roles

BEARER_PREFIX = "bearer "


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory (engine created on first use)."""
    return create_session_factory(get_settings().database_url)


def get_user_store() -> UserStore:
    return DbUserStore(get_session_factory())


def get_audit_store() -> AuditStore:
    return DbAuditStore(get_session_factory())


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_credential_validator(
    settings: Annotated[AppSettings, Depends(get_settings)],
) -> JwtCredentialValidator:
    return JwtCredentialValidator(settings.jwt_secret, settings.jwt_algorithm)


def get_credential(
    validator: Annotated[JwtCredentialValidator, Depends(get_credential_validator)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[ValidatedCredential]:
    """Validated bearer credential, or None when no Authorization header was sent.
    Raises InvalidTokenError/ExpiredTokenError (handled in main) on a bad token."""
    if not authorization:
        return None
    token = authorization
    if token.lower().startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    return validator.validate(token)


def get_policy(settings: Annotated[AppSettings, Depends(get_settings)]) -> RolePolicy:
    (privileged,) = parse_roles([settings.privileged_role])
    return RolePolicy(privileged_role=privileged)


def get_pipeline(
    settings: Annotated[AppSettings, Depends(get_settings)],
    policy: Annotated[RolePolicy, Depends(get_policy)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
    audit_store: Annotated[AuditStore, Depends(get_audit_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> OperationPipeline:
    """Build the pipeline with every collaborator passed explicitly."""
    return OperationPipeline(
        identity_resolver=IdentityResolver(user_store),
        policy=policy,
        user_store=user_store,
        audit_recorder=AuditRecorder(audit_store),
        password_hasher=hasher,
        logger=logging.getLogger("user_audit.pipeline"),
        definitions=build_operation_definitions(parse_roles(settings.mutating_roles)),
    )


def get_user_queries(
    settings: Annotated[AppSettings, Depends(get_settings)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
) -> UserQueryService:
    return UserQueryService(user_store, default_limit=settings.pagination_default_limit)


def get_correlation_id(request: Request) -> str:
    """Extract correlation_id from request.state (set by middleware)."""
    return getattr(request.state, "correlation_id", "") or ""
