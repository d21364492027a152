"""
Typed failures surfaced to GraphQL callers.

Each error carries an ``extensions`` mapping; graphql-core copies it onto the
GraphQL error it builds around the original exception, so clients receive a
stable ``extensions.code`` alongside the message.
"""

from __future__ import annotations


class UserHubError(Exception):
    """Base class for errors that are reported to the caller as-is."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def extensions(self) -> dict[str, str]:
        return {"code": self.code}


class UnauthenticatedError(UserHubError):
    """No valid identity for an operation that requires one, or a failed login."""

    code = "UNAUTHENTICATED"


class ForbiddenError(UserHubError):
    """Authenticated, but the policy does not allow the operation."""

    code = "FORBIDDEN"


class ConflictError(UserHubError):
    """A username or email is already taken."""

    code = "CONFLICT"


class NotFoundError(UserHubError):
    """A referenced identity does not exist."""

    code = "NOT_FOUND"


class UserInputError(UserHubError):
    """Input failed validation."""

    code = "BAD_USER_INPUT"
