"""Read-only user queries. Public, not audited."""

from typing import List, Optional

from user_audit.application.user_store import UserStore
from user_audit.domain.exceptions import EntityNotFoundError
from user_audit.domain.schemas.user import UserResponse


class UserQueryService:
    def __init__(self, user_store: UserStore, default_limit: int = 10) -> None:
        self._users = user_store
        self._default_limit = default_limit

    async def list_users(self, limit: Optional[int] = None, offset: int = 0) -> List[UserResponse]:
        records = await self._users.list(limit or self._default_limit, offset)
        return [UserResponse.from_record(r) for r in records]

    async def find_user(self, term: str) -> UserResponse:
        """term is a user id or an email. Raises EntityNotFoundError."""
        term = term.strip()
        if "@" in term:
            record = await self._users.find_by_email(term.lower())
        else:
            record = await self._users.find_by_id(term)
        if record is None:
            raise EntityNotFoundError(f"User not found: {term}")
        return UserResponse.from_record(record)
