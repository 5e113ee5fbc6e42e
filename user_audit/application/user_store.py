"""User store protocol. Application layer depends on this; infrastructure implements it."""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Protocol

from user_audit.domain.models.user import UserRecord
from user_audit.security.rbac import Role

# Keys a store accepts in update(); anything else is a programming error.
UPDATABLE_FIELDS = frozenset(
    {"name", "lastname", "email", "password_hash", "roles", "is_active"}
)


@dataclass(frozen=True)
class NewUser:
    """Data for a user about to be created. Holds the hash, never the plaintext."""

    name: str
    email: str
    password_hash: str
    roles: FrozenSet[Role]
    is_active: bool = True
    lastname: Optional[str] = None


class UserStore(Protocol):
    """
    Persistence for user records. The store is the single point of synchronization:
    uniqueness conflicts raise DuplicateEntityError, outages raise StoreUnavailableError.
    """

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    async def list(self, limit: int, offset: int) -> List[UserRecord]:
        ...

    async def create(self, data: NewUser) -> UserRecord:
        ...

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserRecord]:
        """Apply changes and return the updated record, or None if it does not exist."""
        ...

    async def delete(self, user_id: str) -> Optional[UserRecord]:
        """Remove and return the record, or None if it does not exist."""
        ...
