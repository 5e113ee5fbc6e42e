"""Security: identity resolution, RBAC and self-protection guards, credentials, passwords. No FastAPI."""

from user_audit.security.credentials import JwtCredentialValidator
from user_audit.security.identity import IdentityResolver, Principal, ValidatedCredential
from user_audit.security.passwords import PasswordHasher
from user_audit.security.rbac import AuthorizationDecision, DenyReason, Role, RolePolicy

__all__ = [
    "AuthorizationDecision",
    "DenyReason",
    "IdentityResolver",
    "JwtCredentialValidator",
    "PasswordHasher",
    "Principal",
    "Role",
    "RolePolicy",
    "ValidatedCredential",
]
