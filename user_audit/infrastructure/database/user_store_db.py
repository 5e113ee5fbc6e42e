"""DB-backed user store. Persists users to PostgreSQL (users table)."""

import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from user_audit.application.exceptions import StoreUnavailableError
from user_audit.application.user_store import UPDATABLE_FIELDS, NewUser
from user_audit.domain.exceptions import DuplicateEntityError
from user_audit.domain.models.user import UserRecord
from user_audit.infrastructure.database.models import UserModel
from user_audit.security.rbac import parse_roles


@contextmanager
def _store_errors(action: str, email: Optional[str] = None):
    """Translate SQLAlchemy errors: unique violations to DuplicateEntityError, the rest to StoreUnavailableError."""
    try:
        yield
    except IntegrityError as e:
        message = f"User {email} already exists" if email else "User already exists"
        raise DuplicateEntityError(message) from e
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"User store {action} failed: {e}") from e


def _parse_id(user_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


def _to_record(orm: UserModel) -> UserRecord:
    return UserRecord(
        id=str(orm.id),
        name=orm.name,
        lastname=orm.lastname,
        email=orm.email,
        password_hash=orm.password_hash,
        roles=parse_roles(orm.roles or []),
        is_active=bool(orm.is_active),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def _roles_column(roles) -> list:
    return sorted(r.value for r in roles)


class DbUserStore:
    """Implements UserStore protocol. One session per call; each mutation commits on its own."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        pk = _parse_id(user_id)
        if pk is None:
            return None
        with _store_errors("read"):
            async with self._session_factory() as session:
                orm = await session.get(UserModel, pk)
                return _to_record(orm) if orm else None

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        stmt = select(UserModel).where(UserModel.email == email.strip().lower())
        with _store_errors("read"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                orm = result.scalar_one_or_none()
                return _to_record(orm) if orm else None

    async def list(self, limit: int, offset: int) -> List[UserRecord]:
        stmt = select(UserModel).order_by(UserModel.created_at).limit(limit).offset(offset)
        with _store_errors("read"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [_to_record(orm) for orm in result.scalars().all()]

    async def create(self, data: NewUser) -> UserRecord:
        orm = UserModel(
            id=uuid.uuid4(),
            name=data.name,
            lastname=data.lastname,
            email=data.email,
            password_hash=data.password_hash,
            roles=_roles_column(data.roles),
            is_active=data.is_active,
        )
        with _store_errors("create", data.email):
            async with self._session_factory() as session:
                session.add(orm)
                await session.commit()
                await session.refresh(orm)
                return _to_record(orm)

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserRecord]:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        pk = _parse_id(user_id)
        if pk is None:
            return None
        with _store_errors("update", changes.get("email")):
            async with self._session_factory() as session:
                orm = await session.get(UserModel, pk)
                if orm is None:
                    return None
                for key, value in changes.items():
                    setattr(orm, key, _roles_column(value) if key == "roles" else value)
                await session.commit()
                await session.refresh(orm)
                return _to_record(orm)

    async def delete(self, user_id: str) -> Optional[UserRecord]:
        pk = _parse_id(user_id)
        if pk is None:
            return None
        with _store_errors("delete"):
            async with self._session_factory() as session:
                orm = await session.get(UserModel, pk)
                if orm is None:
                    return None
                record = _to_record(orm)
                await session.delete(orm)
                await session.commit()
                return record
