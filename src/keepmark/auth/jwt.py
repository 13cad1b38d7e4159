"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token carries the user id in `sub` plus an `exp` instant; nothing
is stored server-side, so a token is valid until it expires.

TokenIssuer owns the signing secret and algorithm. It is built once in
create_app() from Settings and kept on app.state.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from keepmark.config import Settings


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenExpired(TokenError):
    """Signature is valid but `exp` is in the past."""


class TokenMalformed(TokenError):
    """Not a decodable JWT, or required claims are missing/invalid."""


class TokenSignatureInvalid(TokenError):
    """Signed with a different key or tampered with."""


class TokenIssuer:
    """Mints and verifies signed, time-limited access tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 15,
    ):
        if not secret:
            raise ValueError("TokenIssuer requires a non-empty secret")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_minutes=settings.access_token_expire_minutes,
        )

    def issue(
        self,
        user_id: int,
        email: Optional[str] = None,
        expires_minutes: Optional[int] = None,
    ) -> str:
        """Create a JWT access token for a user."""
        now = datetime.now(timezone.utc)
        lifetime = self.expires_minutes if expires_minutes is None else expires_minutes
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(minutes=lifetime),
        }
        if email:
            payload["email"] = email
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """Verify a token and return the user id it was issued for.

        PyJWT checks the signature before any claim, so an expired token
        with a bad signature reports the signature, not the expiry.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token has expired")
        except jwt.InvalidSignatureError:
            raise TokenSignatureInvalid("Token signature is invalid")
        except jwt.InvalidTokenError as e:
            raise TokenMalformed(f"Invalid token: {e}")

        try:
            return int(payload["sub"])
        except (TypeError, ValueError):
            raise TokenMalformed("Invalid token: subject is not a user id")
