"""JWT session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries everything a request needs to know about the caller — user id,
email, display name, admin flag — signed with the server secret (HS256
by default) and stamped with an expiry. No session table exists.

The flip side: a token can't be revoked before it expires. Logging out
only drops the cookie on the client.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt


class TokenError(Exception):
    """Raised when a token is malformed, tampered with, or expired."""


@dataclass(frozen=True)
class Claims:
    """Decoded session token payload."""

    user_id: int
    email: str
    name: str
    is_admin: bool
    expires_at: datetime


def create_session_token(
    user_id: int,
    email: str,
    name: str,
    is_admin: bool,
    secret: str,
    algorithm: str = "HS256",
    lifetime: timedelta = timedelta(hours=24),
) -> str:
    """Create a signed session token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),  # PyJWT requires a string subject
        "email": email,
        "name": name,
        "is_admin": is_admin,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(token: str, secret: str, algorithm: str = "HS256") -> Claims:
    """Verify and decode a session token.

    Returns the claims on success.
    Raises TokenError on failure.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    try:
        return Claims(
            user_id=int(payload["sub"]),
            email=payload["email"],
            name=payload["name"],
            is_admin=bool(payload["is_admin"]),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise TokenError(f"Malformed claims: {e}")
