"""Base authentication adapter interface and types."""

from __future__ import annotations

from typing import Literal, NotRequired, Protocol, TypedDict
from uuid import UUID


class Principal(TypedDict):
    """Identity extracted from an incoming token."""

    provider: Literal["jwt"]
    subject: str  # user id the token was issued for
    claims: NotRequired[dict]


class AuthAdapter(Protocol):
    """Token issuing and verification interface."""

    async def verify_token(self, token: str) -> Principal:
        """
        Verify a token and return the principal identity.

        Args:
            token: The authentication token to verify

        Returns:
            Principal containing identity information

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        ...

    async def issue_token(self, user_id: UUID, claims: dict | None = None) -> str:
        """
        Issue a new token for a user.

        Args:
            user_id: User ID the token authenticates
            claims: Optional additional claims to include

        Returns:
            Signed token string
        """
        ...


class AuthenticationError(Exception):
    """Raised when a token cannot be verified."""

    pass
