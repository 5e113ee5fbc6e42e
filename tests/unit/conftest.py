"""Shared fixtures: in-memory user/audit stores, seeded accounts, pipeline wiring."""

import asyncio
import dataclasses
import uuid
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from user_audit.application.outcomes import DEFAULT_OPERATIONS
from user_audit.application.pipeline import OperationPipeline
from user_audit.application.user_store import NewUser
from user_audit.domain.exceptions import DuplicateEntityError
from user_audit.domain.models.user import UserRecord
from user_audit.governance.audit_models import AuditEntry
from user_audit.governance.audit_recorder import AuditRecorder
from user_audit.security.identity import IdentityResolver, ValidatedCredential
from user_audit.security.rbac import Role, RolePolicy


class InMemoryUserStore:
    """In-memory UserStore for unit tests. Records every mutating call."""

    def __init__(self) -> None:
        self.records: Dict[str, UserRecord] = {}
        self.mutations: List[str] = []
        self.fail_with: Optional[Exception] = None

    def seed(self, record: UserRecord) -> UserRecord:
        self.records[record.id] = record
        return record

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self.records.get(user_id)

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return next((r for r in self.records.values() if r.email == email), None)

    async def list(self, limit: int, offset: int) -> List[UserRecord]:
        return list(self.records.values())[offset:offset + limit]

    async def create(self, data: NewUser) -> UserRecord:
        self._maybe_fail()
        if await self.find_by_email(data.email):
            raise DuplicateEntityError(f"User {data.email} already exists")
        self.mutations.append("create")
        record = UserRecord(id=str(uuid.uuid4()), **dataclasses.asdict(data))
        self.records[record.id] = record
        return record

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserRecord]:
        self._maybe_fail()
        record = self.records.get(user_id)
        if record is None:
            return None
        email = changes.get("email")
        if email and any(r.email == email and r.id != user_id for r in self.records.values()):
            raise DuplicateEntityError(f"User {email} already exists")
        self.mutations.append("update")
        updated = dataclasses.replace(record, **changes)
        self.records[user_id] = updated
        return updated

    async def delete(self, user_id: str) -> Optional[UserRecord]:
        self._maybe_fail()
        self.mutations.append("delete")
        return self.records.pop(user_id, None)


class InMemoryAuditStore:
    """Append-only in-memory AuditStore. Can fail, or block until released."""

    def __init__(self) -> None:
        self.entries: List[AuditEntry] = []
        self.fail_with: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.entered = asyncio.Event()

    async def append(self, entry: AuditEntry) -> None:
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self.entries.append(entry)


class FakeHasher:
    def hash(self, plain: str) -> str:
        return f"hashed::{plain}"

    def verify(self, hashed: str, plain: str) -> bool:
        return hashed == f"hashed::{plain}"


def _make_user(
    *roles: Role,
    email: Optional[str] = None,
    is_active: bool = True,
    name: str = "Test",
) -> UserRecord:
    user_id = str(uuid.uuid4())
    return UserRecord(
        id=user_id,
        name=name,
        lastname="User",
        email=email or f"{user_id[:8]}@example.com",
        password_hash="hashed::Secret123#",
        roles=frozenset(roles or (Role.USER,)),
        is_active=is_active,
    )


def _credential_for(record: UserRecord) -> ValidatedCredential:
    return ValidatedCredential(subject=record.id, email=record.email)


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def audit_store():
    return InMemoryAuditStore()


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def policy():
    return RolePolicy()


@pytest.fixture
def superadmin(user_store):
    return user_store.seed(_make_user(Role.SUPERADMIN, email="root@example.com"))


@pytest.fixture
def admin(user_store):
    return user_store.seed(_make_user(Role.ADMIN, email="admin@example.com"))


@pytest.fixture
def plain_user(user_store):
    return user_store.seed(_make_user(Role.USER, email="user@example.com"))


@pytest.fixture
def make_pipeline(user_store, audit_store, logger, policy):
    def _make(definitions=None, hasher=None):
        return OperationPipeline(
            identity_resolver=IdentityResolver(user_store),
            policy=policy,
            user_store=user_store,
            audit_recorder=AuditRecorder(audit_store),
            password_hasher=hasher or FakeHasher(),
            logger=logger,
            definitions=definitions or DEFAULT_OPERATIONS,
        )

    return _make


@pytest.fixture
def pipeline(make_pipeline):
    return make_pipeline()


@pytest.fixture
def fake_hasher():
    return FakeHasher()


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def credential_for():
    return _credential_for
