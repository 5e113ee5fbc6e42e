"""Role-based access control and self-protection guards for privileged accounts. No FastAPI."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, AbstractSet, Iterable, Optional

if TYPE_CHECKING:
    from user_audit.security.identity import Principal


class Role(str, Enum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    USER = "USER"


class DenyReason(str, Enum):
    PRINCIPAL_MISSING = "PRINCIPAL_MISSING"
    PRINCIPAL_INACTIVE = "PRINCIPAL_INACTIVE"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    CANNOT_MODIFY_PRIVILEGED_ACCOUNT = "CANNOT_MODIFY_PRIVILEGED_ACCOUNT"
    CANNOT_GRANT_PRIVILEGED_ROLE = "CANNOT_GRANT_PRIVILEGED_ROLE"


@dataclass(frozen=True)
class AuthorizationDecision:
    """
    Allow or deny. On deny, reason is set and satisfying_roles lists the roles
    that would have passed the check. satisfying_roles is diagnostic only.
    """

    allowed: bool
    reason: Optional[DenyReason] = None
    message: Optional[str] = None
    satisfying_roles: tuple[Role, ...] = ()

    @classmethod
    def allow(cls) -> "AuthorizationDecision":
        return cls(allowed=True)

    @classmethod
    def deny(
        cls,
        reason: DenyReason,
        message: str,
        satisfying_roles: Iterable[Role] = (),
    ) -> "AuthorizationDecision":
        return cls(
            allowed=False,
            reason=reason,
            message=message,
            satisfying_roles=tuple(sorted(satisfying_roles, key=lambda r: r.value)),
        )


def parse_roles(values: Iterable[str]) -> frozenset[Role]:
    """Upper-case and map raw role names onto Role. Raises ValueError on unknown names."""
    return frozenset(Role(v.strip().upper()) for v in values)


class RolePolicy:
    """
    Stateless role policy. Role comparisons are exact-match; no hierarchy is
    inferred, so ADMIN never satisfies a SUPERADMIN requirement.
    The privileged role is configuration (SUPERADMIN unless told otherwise).
    """

    def __init__(self, privileged_role: Role = Role.SUPERADMIN) -> None:
        self._privileged = privileged_role

    @property
    def privileged_role(self) -> Role:
        return self._privileged

    def authorize(
        self,
        principal: Optional["Principal"],
        required_roles: AbstractSet[Role],
    ) -> AuthorizationDecision:
        """Generic check: allow when principal holds any of required_roles. Empty set is public."""
        if not required_roles:
            return AuthorizationDecision.allow()
        if principal is None:
            return AuthorizationDecision.deny(
                DenyReason.PRINCIPAL_MISSING,
                "No authenticated principal on request",
                required_roles,
            )
        if not principal.is_active:
            return AuthorizationDecision.deny(
                DenyReason.PRINCIPAL_INACTIVE,
                f"User {principal.email} is inactive",
                required_roles,
            )
        if principal.roles & required_roles:
            return AuthorizationDecision.allow()
        wanted = ", ".join(sorted(r.value for r in required_roles))
        return AuthorizationDecision.deny(
            DenyReason.INSUFFICIENT_ROLE,
            f"User {principal.email} needs a valid role: [{wanted}]",
            required_roles,
        )

    def _is_privileged(self, principal: Optional["Principal"]) -> bool:
        return principal is not None and self._privileged in principal.roles

    def check_modify_target(
        self,
        principal: Optional["Principal"],
        target_roles: AbstractSet[Role],
    ) -> AuthorizationDecision:
        """Edit/delete guard: only a privileged actor may touch a privileged account."""
        if self._privileged in target_roles and not self._is_privileged(principal):
            return AuthorizationDecision.deny(
                DenyReason.CANNOT_MODIFY_PRIVILEGED_ACCOUNT,
                f"Operation not allowed: cannot modify or delete a {self._privileged.value} user",
                (self._privileged,),
            )
        return AuthorizationDecision.allow()

    def check_grant(
        self,
        principal: Optional["Principal"],
        requested_roles: AbstractSet[Role],
    ) -> AuthorizationDecision:
        """Create/elevate guard: only a privileged actor may hand out the privileged role."""
        if self._privileged in requested_roles and not self._is_privileged(principal):
            return AuthorizationDecision.deny(
                DenyReason.CANNOT_GRANT_PRIVILEGED_ROLE,
                f"Operation not allowed: cannot grant the {self._privileged.value} role",
                (self._privileged,),
            )
        return AuthorizationDecision.allow()
