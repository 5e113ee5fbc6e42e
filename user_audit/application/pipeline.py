"""Operation pipeline: authenticate -> authorize -> execute -> audit for user mutations."""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Union

from user_audit.application.failure_classifier import FailureClassifier
from user_audit.application.outcomes import (
    DEFAULT_OPERATIONS,
    REJECTION_REASONS,
    OperationDefinition,
    OperationKind,
    OperationResult,
    PipelineState,
    ReasonCode,
)
from user_audit.application.user_store import NewUser, UserStore
from user_audit.core.context import get_correlation_id, new_correlation_id
from user_audit.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    PasswordMismatchError,
)
from user_audit.domain.models.user import USER_ENTITY_TYPE, UserRecord, UserSnapshot
from user_audit.domain.schemas.user import CreateUserRequest, UpdateUserRequest, UserResponse
from user_audit.governance.audit_models import AuditAction, AuditEntry
from user_audit.governance.audit_recorder import AuditRecorder
from user_audit.security.identity import IdentityResolver, Principal, ValidatedCredential
from user_audit.security.passwords import PasswordHasher
from user_audit.security.rbac import AuthorizationDecision, RolePolicy

ANONYMOUS_ACTOR = "anonymous"

# The event loop holds tasks weakly; shielded audit writes stay here until done.
_PENDING_AUDITS: set[asyncio.Task] = set()

Payload = Union[CreateUserRequest, UpdateUserRequest, None]


class _Rejected(Exception):
    """Internal short-circuit carrying a classified outcome out of a pipeline stage."""

    def __init__(self, reason: ReasonCode, detail: str, satisfying_roles=()) -> None:
        self.reason = reason
        self.detail = detail
        self.satisfying_roles = tuple(satisfying_roles)
        super().__init__(detail)


class _Run:
    """Per-request bookkeeping: the stages reached so far. Never shared between requests."""

    def __init__(self, kind: OperationKind, correlation_id: str) -> None:
        self.kind = kind
        self.correlation_id = correlation_id
        self.stages: list[PipelineState] = [PipelineState.STARTED]

    def advance(self, state: PipelineState) -> None:
        self.stages.append(state)

    def finish(self, state: PipelineState, **fields: Any) -> OperationResult:
        self.stages.append(state)
        return OperationResult(
            kind=self.kind,
            state=state,
            correlation_id=self.correlation_id,
            stages=tuple(self.stages),
            **fields,
        )


def _password_pair(payload: Payload) -> tuple[Optional[str], Optional[str]]:
    if payload is None:
        return None, None
    return payload.password, payload.confirm_password


def _check_password_confirmation(kind: OperationKind, payload: Payload) -> None:
    """Create always needs a matching pair; update only when either field is given."""
    password, confirm = _password_pair(payload)
    if kind == OperationKind.UPDATE and password is None and confirm is None:
        return
    if password != confirm:
        raise PasswordMismatchError("Passwords do not match")


def _check_update_fields(payload: UpdateUserRequest) -> None:
    if not payload.model_dump(exclude_unset=True, exclude_none=True):
        raise DomainValidationError("Update has no fields to change")
    if payload.roles is not None and not payload.roles:
        raise DomainValidationError("roles must not be empty")


class OperationPipeline:
    """
    Orchestrates one user mutation per call. No HTTP, no FastAPI.
    Ordering: authenticate, authorize (role check, password confirmation,
    self-protection guards), execute against the user store, record audit.
    Store failures during execution are surfaced; audit-write failures are
    logged with the correlation id and do not change the outcome.
    """

    def __init__(
        self,
        *,
        identity_resolver: IdentityResolver,
        policy: RolePolicy,
        user_store: UserStore,
        audit_recorder: AuditRecorder,
        password_hasher: PasswordHasher,
        logger: logging.Logger,
        definitions: Optional[Mapping[OperationKind, OperationDefinition]] = None,
    ) -> None:
        self._identity = identity_resolver
        self._policy = policy
        self._users = user_store
        self._audit = audit_recorder
        self._hasher = password_hasher
        self._logger = logger
        self._definitions = dict(definitions or DEFAULT_OPERATIONS)

    async def execute(
        self,
        kind: OperationKind,
        credential: Optional[ValidatedCredential],
        *,
        target_id: Optional[str] = None,
        payload: Payload = None,
        correlation_id: Optional[str] = None,
    ) -> OperationResult:
        """
        Run one operation and return its classified outcome. Never raises for the
        conditions in ReasonCode; cancellation propagates (see _record_audit).
        """
        definition = self._definitions[kind]
        if definition.needs_target and not target_id:
            raise ValueError(f"{kind.value} requires a target_id")
        if kind == OperationKind.CREATE and not isinstance(payload, CreateUserRequest):
            raise ValueError("CREATE requires a CreateUserRequest payload")
        if kind == OperationKind.UPDATE and not isinstance(payload, UpdateUserRequest):
            raise ValueError("UPDATE requires an UpdateUserRequest payload")

        run = _Run(kind, correlation_id or get_correlation_id() or new_correlation_id())
        try:
            principal = await self._authenticate(credential)
            run.advance(PipelineState.AUTHENTICATED)
            target = await self._authorize(definition, principal, target_id, payload)
            run.advance(PipelineState.AUTHORIZED)
            before, after = await self._mutate(kind, target, payload)
            run.advance(PipelineState.EXECUTED)
        except _Rejected as rejection:
            return self._stop(run, rejection.reason, rejection.detail, rejection.satisfying_roles)
        except Exception as e:
            reason = FailureClassifier.classify(e)
            if reason == ReasonCode.INTERNAL_ERROR:
                self._logger.exception(
                    "operation_unexpected_error",
                    extra={"correlation_id": run.correlation_id, "operation": kind.value},
                )
            return self._stop(run, reason, getattr(e, "message", str(e)))

        actor_id = principal.id if principal else ANONYMOUS_ACTOR
        audit_task = asyncio.ensure_future(
            self._record_audit(run, definition.audit_action, actor_id, before, after)
        )
        _PENDING_AUDITS.add(audit_task)
        audit_task.add_done_callback(_PENDING_AUDITS.discard)
        entry = await asyncio.shield(audit_task)
        if entry is not None:
            run.advance(PipelineState.AUDITED)
        result_record = after or before
        self._logger.info(
            "operation_completed",
            extra={
                "correlation_id": run.correlation_id,
                "operation": kind.value,
                "entity_id": result_record.id,
                "actor_id": actor_id,
                "audited": entry is not None,
            },
        )
        return run.finish(
            PipelineState.COMPLETED,
            value=UserResponse.from_record(result_record),
            audit_entry=entry,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _authenticate(
        self, credential: Optional[ValidatedCredential]
    ) -> Optional[Principal]:
        """No credential means no principal; the role check decides whether that is allowed."""
        if credential is None:
            return None
        return await self._identity.resolve(credential)

    async def _authorize(
        self,
        definition: OperationDefinition,
        principal: Optional[Principal],
        target_id: Optional[str],
        payload: Payload,
    ) -> Optional[UserRecord]:
        """Role check, then password confirmation, then self-protection guards. Returns the target."""
        self._require(self._policy.authorize(principal, definition.required_roles))

        kind = definition.kind
        if kind in (OperationKind.CREATE, OperationKind.UPDATE):
            _check_password_confirmation(kind, payload)
        if kind == OperationKind.UPDATE:
            _check_update_fields(payload)

        target = None
        if definition.needs_target:
            target = await self._users.find_by_id(target_id)
            if target is None:
                raise EntityNotFoundError(f"User with id: {target_id} not found")
            self._require(self._policy.check_modify_target(principal, target.roles))

        if payload is not None and payload.roles:
            self._require(self._policy.check_grant(principal, frozenset(payload.roles)))
        return target

    @staticmethod
    def _require(decision: AuthorizationDecision) -> None:
        if not decision.allowed:
            raise _Rejected(
                FailureClassifier.from_denial(decision.reason),
                decision.message or decision.reason.value,
                decision.satisfying_roles,
            )

    async def _mutate(
        self,
        kind: OperationKind,
        target: Optional[UserRecord],
        payload: Payload,
    ) -> tuple[Optional[UserRecord], Optional[UserRecord]]:
        """Run the business mutation. Returns (before, after) records."""
        if kind == OperationKind.CREATE:
            created = await self._users.create(self._new_user(payload))
            return None, created

        if kind == OperationKind.DELETE:
            deleted = await self._users.delete(target.id)
            if deleted is None:
                raise EntityNotFoundError(f"User with id: {target.id} not found")
            return target, None

        if kind == OperationKind.DEACTIVATE:
            changes: Dict[str, Any] = {"is_active": False}
        else:
            changes = self._update_changes(payload)
        updated = await self._users.update(target.id, changes)
        if updated is None:
            raise EntityNotFoundError(f"User with id: {target.id} not found")
        return target, updated

    def _new_user(self, payload: CreateUserRequest) -> NewUser:
        return NewUser(
            name=payload.name,
            lastname=payload.lastname,
            email=payload.email,
            password_hash=self._hasher.hash(payload.password),
            roles=frozenset(payload.roles),
            is_active=payload.is_active,
        )

    def _update_changes(self, payload: UpdateUserRequest) -> Dict[str, Any]:
        changes = payload.model_dump(
            exclude_unset=True,
            exclude={"password", "confirm_password"},
        )
        changes = {k: v for k, v in changes.items() if v is not None}
        if "roles" in changes:
            changes["roles"] = frozenset(payload.roles)
        if payload.password:
            changes["password_hash"] = self._hasher.hash(payload.password)
        return changes

    async def _record_audit(
        self,
        run: _Run,
        action: AuditAction,
        actor_id: str,
        before: Optional[UserRecord],
        after: Optional[UserRecord],
    ) -> Optional[AuditEntry]:
        """
        Best-effort audit write. Runs shielded so that a request cancelled after
        the mutation still gets its audit entry. Failures are logged, never raised.
        """
        entity = after or before
        try:
            return await self._audit.record(
                entity_type=USER_ENTITY_TYPE,
                entity_id=entity.id,
                action=action,
                actor_id=actor_id,
                correlation_id=run.correlation_id,
                before_state=UserSnapshot.from_record(before) if before else None,
                after_state=UserSnapshot.from_record(after) if after else None,
            )
        except Exception as e:
            self._logger.error(
                "audit_write_failed",
                extra={
                    "correlation_id": run.correlation_id,
                    "operation": run.kind.value,
                    "entity_type": USER_ENTITY_TYPE,
                    "entity_id": entity.id,
                    "actor_id": actor_id,
                    "reason": FailureClassifier.classify(e).value,
                    "error": str(e),
                },
            )
            # Do not re-raise: the committed mutation is the source of truth.
            return None

    def _stop(
        self,
        run: _Run,
        reason: ReasonCode,
        detail: str,
        satisfying_roles=(),
    ) -> OperationResult:
        state = PipelineState.REJECTED if reason in REJECTION_REASONS else PipelineState.FAILED
        log = self._logger.warning if state == PipelineState.REJECTED else self._logger.error
        log(
            f"operation_{state.value.lower()}",
            extra={
                "correlation_id": run.correlation_id,
                "operation": run.kind.value,
                "reason": reason.value,
                "detail": detail,
            },
        )
        return run.finish(
            state,
            reason=reason,
            detail=detail,
            satisfying_roles=tuple(satisfying_roles),
        )
