"""JWT authentication adapter for self-issued tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.exceptions import InvalidTokenError

from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)

DEFAULT_TOKEN_EXPIRY = timedelta(days=7)


class JWTAuthAdapter:
    """Issues and verifies HMAC-signed, time-bounded bearer tokens.

    Tokens are stateless: expiry is the only way one stops being valid.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "userhub",
        audience: str = "userhub-api",
        token_expiry: timedelta = DEFAULT_TOKEN_EXPIRY,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.token_expiry = token_expiry

    def _decode(self, token: str) -> dict:
        return jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            issuer=self.issuer,
            audience=self.audience,
            options={
                "require": ["exp", "sub"],
                "verify_exp": True,
                "verify_nbf": True,
                "verify_iat": True,
            },
        )

    async def verify_token(self, token: str) -> Principal:
        """Verify a JWT token and return the principal."""
        try:
            payload = self._decode(token)
        except InvalidTokenError as e:
            logger.warning("JWT token validation failed", error=str(e))
            raise AuthenticationError("Invalid token") from e

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Missing 'sub' claim in token")

        return Principal(provider="jwt", subject=subject, claims=payload)

    async def issue_token(self, user_id: UUID, claims: dict | None = None) -> str:
        """Issue a new JWT token for ``user_id``."""
        now = datetime.now(UTC)

        payload = {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "nbf": now,
            "exp": now + self.token_expiry,
        }
        if claims:
            payload.update(claims)
        payload["sub"] = str(user_id)

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
