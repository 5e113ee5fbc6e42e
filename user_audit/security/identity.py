"""Identity resolution: validated credential -> acting Principal. Read-only. No FastAPI."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Optional, Protocol

from user_audit.security.exceptions import PrincipalInactiveError, PrincipalNotFoundError
from user_audit.security.rbac import Role

if TYPE_CHECKING:
    from user_audit.domain.models.user import UserRecord


@dataclass(frozen=True)
class ValidatedCredential:
    """Claims of a token whose signature and expiry were already checked upstream."""

    subject: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Principal:
    """The authenticated actor for one request. Never persisted by this package."""

    id: str
    email: str
    roles: FrozenSet[Role]
    is_active: bool

    def has_role(self, role: Role) -> bool:
        return role in self.roles


class UserLookup(Protocol):
    async def find_by_id(self, user_id: str) -> Optional["UserRecord"]:
        ...


class IdentityResolver:
    """Look up the account behind a validated credential and build the Principal."""

    def __init__(self, user_store: UserLookup) -> None:
        self._users = user_store

    async def resolve(self, credential: ValidatedCredential) -> Principal:
        """
        Raises PrincipalNotFoundError if no account matches the credential subject,
        PrincipalInactiveError if the account is deactivated.
        """
        record = await self._users.find_by_id(credential.subject)
        if record is None:
            raise PrincipalNotFoundError(f"User not found: {credential.subject}")
        if not record.is_active:
            raise PrincipalInactiveError(f"User {record.email} is inactive")
        return Principal(
            id=record.id,
            email=record.email,
            roles=frozenset(record.roles),
            is_active=record.is_active,
        )
