"""Bearer token validation (PyJWT). Signature and expiry only; issuance lives elsewhere."""

import jwt

from user_audit.security.exceptions import ExpiredTokenError, InvalidTokenError
from user_audit.security.identity import ValidatedCredential


class JwtCredentialValidator:
    """Validate an HS* signed JWT and return its subject/email claims."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise InvalidTokenError("JWT secret is required")
        self._secret = secret
        self._algorithm = algorithm

    def validate(self, raw_token: str) -> ValidatedCredential:
        if not raw_token or not raw_token.strip():
            raise InvalidTokenError("Missing bearer token")
        try:
            claims = jwt.decode(
                raw_token.strip(),
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        return ValidatedCredential(subject=str(claims["sub"]), email=claims.get("email"))
