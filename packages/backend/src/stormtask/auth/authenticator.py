"""Authenticator — email/password in, session token out, and back again.

Learn: Two operations, one transition:

    Unauthenticated --[valid credentials]--> Authenticated(claims)

issue_token() returns "" when the credentials don't match. That empty
string is a normal answer ("no token for you"), distinct from an
exception, which means signing itself broke.

validate_token() returns None for anything that isn't a good token —
empty, garbage, tampered, expired. Callers must treat that exactly like
a request that carried no token at all.
"""

from datetime import timedelta
from typing import Optional

import structlog

from stormtask.auth.jwt import Claims, TokenError, create_session_token, verify_token
from stormtask.services.user_service import UserService

logger = structlog.get_logger()


class Authenticator:
    """Issues and validates session tokens for one secret key."""

    def __init__(
        self,
        users: UserService,
        secret: str,
        algorithm: str = "HS256",
        token_lifetime: timedelta = timedelta(hours=24),
    ):
        self.users = users
        self.secret = secret
        self.algorithm = algorithm
        self.token_lifetime = token_lifetime

    async def issue_token(self, email: str, password: str) -> str:
        user = await self.users.verify_credentials(email, password)
        if not user:
            logger.info("auth.credentials_rejected")
            return ""

        token = create_session_token(
            user_id=user.id,
            email=user.email,
            name=user.name,
            is_admin=user.is_admin,
            secret=self.secret,
            algorithm=self.algorithm,
            lifetime=self.token_lifetime,
        )
        logger.info("auth.token_issued", user_id=user.id)
        return token

    def validate_token(self, token: Optional[str]) -> Optional[Claims]:
        if not token:
            return None
        try:
            return verify_token(token, self.secret, algorithm=self.algorithm)
        except TokenError as e:
            logger.info("auth.token_rejected", reason=str(e))
            return None
