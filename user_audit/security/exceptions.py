"""Security-layer exceptions. Typed, no HTTP."""


class SecurityError(Exception):
    """Base for all security-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthenticationError(SecurityError):
    """Base for failures establishing who the caller is."""


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is malformed or its signature does not verify."""


class ExpiredTokenError(AuthenticationError):
    """Raised when a bearer token is past its expiry."""


class PrincipalNotFoundError(AuthenticationError):
    """Raised when a validated credential resolves to no existing account."""


class PrincipalInactiveError(AuthenticationError):
    """Raised when the resolved account has been deactivated."""
