"""Domain model for users as seen by the audit core. No ORM or infrastructure."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional

from user_audit.security.rbac import Role

USER_ENTITY_TYPE = "User"


@dataclass(frozen=True)
class UserRecord:
    """A user-store row. password_hash never leaves the store/pipeline boundary."""

    id: str
    name: str
    email: str
    password_hash: str
    roles: FrozenSet[Role]
    is_active: bool = True
    lastname: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserSnapshot:
    """
    Audit-safe view of a UserRecord. Has no password field, so a secret can
    never be written to the audit trail through it.
    """

    id: str
    name: str
    email: str
    roles: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True
    lastname: Optional[str] = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserSnapshot":
        return cls(
            id=record.id,
            name=record.name,
            lastname=record.lastname,
            email=record.email,
            roles=tuple(sorted(r.value for r in record.roles)),
            is_active=record.is_active,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "lastname": self.lastname,
            "email": self.email,
            "roles": list(self.roles),
            "is_active": self.is_active,
        }
